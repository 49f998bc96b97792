import json

import pygame

from src.core.input_actions import (
    MOD_CTRL,
    MOD_NONE,
    MOD_SHIFT,
    InputActionMap,
    event_modifiers,
    load_action_map,
)


def _key_event(key, mod=0):
    return pygame.event.Event(pygame.KEYDOWN, key=key, mod=mod, unicode="")


def test_default_bindings_cover_editor_shortcuts():
    actions = InputActionMap()
    assert (pygame.K_z, MOD_CTRL) in actions.keys_for_action("undo")
    assert (pygame.K_y, MOD_CTRL) in actions.keys_for_action("redo")
    assert (pygame.K_z, MOD_CTRL | MOD_SHIFT) in actions.keys_for_action("redo")
    assert "rotate" in actions.actions_for_key(pygame.K_r)
    assert "deselect" in actions.actions_for_key(pygame.K_ESCAPE)
    assert "delete" in actions.actions_for_key(pygame.K_DELETE)
    assert "delete" in actions.actions_for_key(pygame.K_BACKSPACE)


def test_modifiers_must_match_exactly():
    actions = InputActionMap()
    assert actions.matches(_key_event(pygame.K_z, pygame.KMOD_LCTRL), "undo")
    assert actions.matches(_key_event(pygame.K_z, pygame.KMOD_LCTRL | pygame.KMOD_LSHIFT), "redo")
    assert not actions.matches(_key_event(pygame.K_z, pygame.KMOD_LCTRL | pygame.KMOD_LSHIFT), "undo")
    assert not actions.matches(_key_event(pygame.K_z), "undo")
    assert not actions.matches(_key_event(pygame.K_r, pygame.KMOD_LCTRL), "rotate")


def test_meta_key_counts_as_ctrl():
    assert event_modifiers(pygame.KMOD_LMETA) == MOD_CTRL
    assert event_modifiers(pygame.KMOD_NONE) == MOD_NONE
    actions = InputActionMap()
    assert actions.matches(_key_event(pygame.K_c, pygame.KMOD_RMETA), "copy")


def test_non_keydown_events_have_no_actions():
    actions = InputActionMap()
    event = pygame.event.Event(pygame.KEYUP, key=pygame.K_r, mod=0)
    assert actions.actions_for_event(event) == set()


def test_override_file_supports_chords_and_key_names(tmp_path):
    binding_path = tmp_path / "input_bindings.json"
    binding_path.write_text(
        json.dumps(
            {
                "rotate": ["t", "K_e"],
                "undo": ["ctrl+u"],
                "paste": ["nonsense+v", "ctrl+b"],
            }
        ),
        encoding="utf-8",
    )

    actions = load_action_map(str(binding_path))
    assert (pygame.K_t, MOD_NONE) in actions.keys_for_action("rotate")
    assert (pygame.K_e, MOD_NONE) in actions.keys_for_action("rotate")
    assert actions.keys_for_action("undo") == ((pygame.K_u, MOD_CTRL),)
    assert actions.keys_for_action("paste") == ((pygame.K_b, MOD_CTRL),)
    # Untouched actions keep their defaults
    assert (pygame.K_y, MOD_CTRL) in actions.keys_for_action("redo")


def test_missing_override_file_uses_defaults(tmp_path):
    actions = load_action_map(str(tmp_path / "missing.json"))
    assert actions.bindings == InputActionMap().bindings


def test_default_bindings_have_no_conflicts():
    assert InputActionMap().detect_conflicts() == []


def test_conflict_detection_flags_exclusive_action_overlap():
    actions = InputActionMap({"undo": ["ctrl+y"]})
    conflicts = actions.detect_conflicts()
    assert any(
        chord == (pygame.K_y, MOD_CTRL) and set(overlap) == {"undo", "redo"}
        for chord, overlap in conflicts
    )
