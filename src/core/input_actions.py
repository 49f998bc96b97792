from __future__ import annotations

import json
import os
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

import pygame

from src.core import config


# Modifier bits of a chord. Ctrl also matches the Cmd/Meta key.
MOD_NONE = 0
MOD_CTRL = 1
MOD_SHIFT = 2
MOD_ALT = 4

_MODIFIER_TOKENS = {
    "ctrl": MOD_CTRL,
    "control": MOD_CTRL,
    "cmd": MOD_CTRL,
    "meta": MOD_CTRL,
    "shift": MOD_SHIFT,
    "alt": MOD_ALT,
}

KeyChord = Tuple[int, int]
ActionBindings = Dict[str, Tuple[KeyChord, ...]]


DEFAULT_ACTION_BINDINGS: Dict[str, Tuple[object, ...]] = {
    "undo": ("ctrl+z",),
    "redo": ("ctrl+y", "ctrl+shift+z"),
    "copy": ("ctrl+c",),
    "cut": ("ctrl+x",),
    "paste": ("ctrl+v",),
    "delete": (pygame.K_DELETE, pygame.K_BACKSPACE),
    "rotate": (pygame.K_r,),
    "deselect": (pygame.K_ESCAPE,),
    "zoom_in": (pygame.K_EQUALS, pygame.K_KP_PLUS, "shift+="),
    "zoom_out": (pygame.K_MINUS, pygame.K_KP_MINUS),
    "reset_view": (pygame.K_0,),
    "toggle_grid": (pygame.K_g,),
    "tool_select": (pygame.K_1,),
    "tool_fill": (pygame.K_2,),
    "tool_empty": (pygame.K_3,),
    "tool_edge": (pygame.K_4,),
    "save": ("ctrl+s",),
    "download": ("ctrl+d",),
    "export_png": ("ctrl+e",),
    "pan_up": (pygame.K_UP,),
    "pan_down": (pygame.K_DOWN,),
    "pan_left": (pygame.K_LEFT,),
    "pan_right": (pygame.K_RIGHT,),
}

EXCLUSIVE_ACTION_GROUPS: Tuple[Tuple[str, ...], ...] = (
    ("undo", "redo"),
    ("copy", "cut", "paste"),
    ("zoom_in", "zoom_out"),
    ("tool_select", "tool_fill", "tool_empty", "tool_edge"),
    ("pan_up", "pan_down"),
    ("pan_left", "pan_right"),
)


def _resolve_key_code(raw_key: object) -> Optional[int]:
    if isinstance(raw_key, int):
        return raw_key
    if not isinstance(raw_key, str):
        return None
    token = raw_key.strip()
    if not token:
        return None
    if token.startswith("K_"):
        token = token[2:]
    try:
        return pygame.key.key_code(token.lower())
    except (ValueError, TypeError):
        return None


def _resolve_chord(raw_key: object) -> Optional[KeyChord]:
    """Parse a binding such as ``"ctrl+shift+z"``, ``"K_r"`` or a bare key code."""
    if isinstance(raw_key, int):
        return raw_key, MOD_NONE
    if not isinstance(raw_key, str):
        return None
    parts = raw_key.strip().split("+")
    # "shift+=" style bindings split cleanly; a lone "+" names the plus key
    if len(parts) > 1 and parts[-1] == "":
        parts = parts[:-2] + ["+"]
    mods = MOD_NONE
    for token in parts[:-1]:
        bit = _MODIFIER_TOKENS.get(token.strip().lower())
        if bit is None:
            return None
        mods |= bit
    key_code = _resolve_key_code(parts[-1])
    if key_code is None:
        return None
    return key_code, mods


def _normalize_keys(raw_keys: Sequence[object]) -> Tuple[KeyChord, ...]:
    normalized: List[KeyChord] = []
    seen: Set[KeyChord] = set()
    for raw_key in raw_keys:
        chord = _resolve_chord(raw_key)
        if chord is None or chord in seen:
            continue
        seen.add(chord)
        normalized.append(chord)
    return tuple(normalized)


def event_modifiers(mod: int) -> int:
    """Fold pygame's left/right modifier flags into chord bits."""
    bits = MOD_NONE
    if mod & (pygame.KMOD_CTRL | pygame.KMOD_META):
        bits |= MOD_CTRL
    if mod & pygame.KMOD_SHIFT:
        bits |= MOD_SHIFT
    if mod & pygame.KMOD_ALT:
        bits |= MOD_ALT
    return bits


class InputActionMap:
    """Maps keyboard chords to logical editor actions."""

    def __init__(self, bindings: Optional[Mapping[str, Sequence[object]]] = None) -> None:
        source = dict(DEFAULT_ACTION_BINDINGS)
        if bindings:
            for action, raw_keys in bindings.items():
                source[action] = tuple(raw_keys)
        self._bindings: ActionBindings = {
            action: _normalize_keys(raw_keys) for action, raw_keys in source.items()
        }

    @property
    def bindings(self) -> ActionBindings:
        return dict(self._bindings)

    def keys_for_action(self, action: str) -> Tuple[KeyChord, ...]:
        return self._bindings.get(action, ())

    def actions_for_key(self, key_code: int, mods: int = MOD_NONE) -> Set[str]:
        chord = (key_code, mods)
        matches: Set[str] = set()
        for action, chords in self._bindings.items():
            if chord in chords:
                matches.add(action)
        return matches

    def actions_for_event(self, event: pygame.event.Event) -> Set[str]:
        if event.type != pygame.KEYDOWN:
            return set()
        return self.actions_for_key(event.key, event_modifiers(getattr(event, "mod", 0)))

    def matches(self, event: pygame.event.Event, action: str) -> bool:
        return action in self.actions_for_event(event)

    def bind(self, action: str, keys: Sequence[object]) -> None:
        self._bindings[action] = _normalize_keys(keys)

    def detect_conflicts(
        self, exclusive_groups: Sequence[Sequence[str]] = EXCLUSIVE_ACTION_GROUPS
    ) -> List[Tuple[KeyChord, Tuple[str, ...]]]:
        chord_to_actions: Dict[KeyChord, Set[str]] = {}
        for action, chords in self._bindings.items():
            for chord in chords:
                chord_to_actions.setdefault(chord, set()).add(action)

        conflicts: List[Tuple[KeyChord, Tuple[str, ...]]] = []
        for chord, actions in chord_to_actions.items():
            for group in exclusive_groups:
                overlap = sorted(actions.intersection(group))
                if len(overlap) > 1:
                    conflicts.append((chord, tuple(overlap)))
                    break
        return conflicts


def _load_binding_overrides(path: str) -> Dict[str, Tuple[object, ...]]:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}

    overrides: Dict[str, Tuple[object, ...]] = {}
    for action, raw_keys in data.items():
        if not isinstance(action, str):
            continue
        if not isinstance(raw_keys, list):
            continue
        overrides[action] = tuple(raw_keys)
    return overrides


def load_action_map(path: Optional[str] = None) -> InputActionMap:
    binding_path = path or os.path.join(config.DATA_DIR, "input_bindings.json")
    overrides = _load_binding_overrides(binding_path)
    return InputActionMap(overrides)
