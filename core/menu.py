"""Profile menu state and the dashboard's outward callback surface."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List

logger = logging.getLogger(__name__)

Action = Callable[[], None]

CURRENT_USER_ROLE = "Workshop Admin"


def _noop() -> None:
    return None


class MenuState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


@dataclass(frozen=True)
class MenuItem:
    key: str
    label: str
    action: Action
    danger: bool = False


@dataclass
class DashboardActions:
    on_create_company: Action = field(default=_noop)
    on_create_job: Action = field(default=_noop)
    on_create_motor: Action = field(default=_noop)
    on_view_profile: Action = field(default=_noop)
    on_system_settings: Action = field(default=_noop)
    on_security: Action = field(default=_noop)
    on_help: Action = field(default=_noop)
    on_sign_out: Action = field(default=_noop)


class MenuController:
    """Closed/open toggle for a dropdown menu.

    Selecting an item runs its handler once and closes the menu right after. Selections that
    arrive while a handler is still running, or once the menu is closed, are dropped.
    """

    def __init__(self, items: Iterable[MenuItem]):
        self._items: Dict[str, MenuItem] = {}
        for item in items:
            self._items[item.key] = item
        self.state = MenuState.CLOSED
        self._dispatching = False

    @property
    def items(self) -> List[MenuItem]:
        return list(self._items.values())

    @property
    def is_open(self) -> bool:
        return self.state is MenuState.OPEN

    def open(self) -> None:
        self.state = MenuState.OPEN

    def toggle(self) -> MenuState:
        self.state = MenuState.CLOSED if self.is_open else MenuState.OPEN
        return self.state

    def dismiss(self) -> bool:
        if not self.is_open:
            return False
        self.state = MenuState.CLOSED
        return True

    def click_outside(self) -> bool:
        return self.dismiss()

    def select(self, key: str) -> bool:
        item = self._items[key]
        if not self.is_open or self._dispatching:
            logger.debug("Ignoring menu selection %r (state=%s)", key, self.state.value)
            return False
        self._dispatching = True
        try:
            item.action()
        finally:
            self._dispatching = False
            self.state = MenuState.CLOSED
        return True


def profile_menu(actions: DashboardActions) -> MenuController:
    return MenuController(
        [
            MenuItem("view_profile", "Profile Settings", actions.on_view_profile),
            MenuItem("system_settings", "System Settings", actions.on_system_settings),
            MenuItem("security", "Security", actions.on_security),
            MenuItem("help", "Help & Support", actions.on_help),
            MenuItem("sign_out", "Sign Out", actions.on_sign_out, danger=True),
        ]
    )
