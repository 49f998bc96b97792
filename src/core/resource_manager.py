from __future__ import annotations

import os
from typing import Callable, Dict, List, Optional, Set, Tuple

import pygame

from src.core import config

ReadyCallback = Callable[[str, pygame.Surface], None]


class ResourceManager:
    """Caches asset images and fonts.

    Images can be fetched two ways: :meth:`get_image` loads synchronously,
    while :meth:`request_image` only queues the path and returns whatever is
    already cached. Queued paths are loaded by :meth:`pump` (once per frame
    in the editor loop) and each waiting callback is told when its image is
    ready. Grid edits never wait on either.
    """

    def __init__(
        self,
        *,
        image_loader: Callable[[str], pygame.Surface] = pygame.image.load,
        font_loader: Callable[[Optional[str], int], pygame.font.Font] = pygame.font.Font,
        path_exists: Callable[[str], bool] = os.path.exists,
    ) -> None:
        self._image_loader = image_loader
        self._font_loader = font_loader
        self._path_exists = path_exists

        self._image_cache: Dict[str, pygame.Surface] = {}
        self._pending: Dict[str, List[ReadyCallback]] = {}
        self._missing: Set[str] = set()
        self._font_cache: Dict[Tuple[Optional[str], int], pygame.font.Font] = {}

    def clear(self) -> None:
        self._image_cache.clear()
        self._pending.clear()
        self._missing.clear()
        self._font_cache.clear()

    @staticmethod
    def _key(path: str) -> str:
        return os.path.abspath(path)

    def is_missing(self, path: str) -> bool:
        """True once ``path`` was tried and replaced by a placeholder."""
        return self._key(path) in self._missing

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def placeholder(
        self,
        size: Tuple[int, int],
        fallback_color: Tuple[int, int, int, int] = config.MISSING_ASSET_COLOR,
    ) -> pygame.Surface:
        image = pygame.Surface(size, pygame.SRCALPHA)
        image.fill(fallback_color)
        pygame.draw.rect(image, config.BLACK, image.get_rect(), 1)
        return image

    def _load(self, path: str) -> pygame.Surface:
        key = self._key(path)
        image: Optional[pygame.Surface] = None
        if self._path_exists(path):
            try:
                image = self._image_loader(path)
                if hasattr(image, "convert_alpha"):
                    try:
                        image = image.convert_alpha()
                    except pygame.error:
                        pass
            except (pygame.error, OSError) as e:
                print(f"Failed to load image {path}: {e}")
                image = None

        if image is None:
            self._missing.add(key)
            image = self.placeholder((config.DEFAULT_TILE_SIZE, config.DEFAULT_TILE_SIZE))

        self._image_cache[key] = image
        return image

    def get_image(self, path: str) -> pygame.Surface:
        key = self._key(path)
        if key in self._image_cache:
            return self._image_cache[key]
        return self._load(path)

    def request_image(self, path: str, on_ready: Optional[ReadyCallback] = None) -> Optional[pygame.Surface]:
        """Return the cached image, or queue ``path`` and return None."""
        key = self._key(path)
        cached = self._image_cache.get(key)
        if cached is not None:
            return cached
        callbacks = self._pending.setdefault(key, [])
        if on_ready is not None:
            callbacks.append(on_ready)
        return None

    def pump(self, limit: Optional[int] = None) -> int:
        """Load up to ``limit`` queued images and fire their callbacks."""
        loaded = 0
        for key in list(self._pending):
            if limit is not None and loaded >= limit:
                break
            callbacks = self._pending.pop(key)
            image = self._load(key)
            loaded += 1
            for callback in callbacks:
                callback(key, image)
        return loaded

    def get_font(self, path: Optional[str], size: int) -> pygame.font.Font:
        cache_key = (path, int(size))
        if cache_key in self._font_cache:
            return self._font_cache[cache_key]

        if not pygame.font.get_init():
            pygame.font.init()

        try:
            font = self._font_loader(path, int(size))
        except (pygame.error, OSError, TypeError):
            font = self._font_loader(None, int(size))

        self._font_cache[cache_key] = font
        return font


_RESOURCE_MANAGER: Optional[ResourceManager] = None


def get_resource_manager() -> ResourceManager:
    global _RESOURCE_MANAGER
    if _RESOURCE_MANAGER is None:
        _RESOURCE_MANAGER = ResourceManager()
    return _RESOURCE_MANAGER
