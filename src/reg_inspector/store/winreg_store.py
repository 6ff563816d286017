"""
Node store backed by the live Windows registry.
"""

import sys
from typing import Any, Optional

from reg_inspector.exceptions import ConfigError, NodeUnreachableError
from reg_inspector.logging_config import get_logger
from reg_inspector.paths import Hive, NodeRoot, RegPath
from reg_inspector.store.base import AccessMode, NodeStore, RegValue, ValueType

logger = get_logger("store.winreg")

REG_NOTIFY_CHANGE_NAME = 0x00000001
REG_NOTIFY_CHANGE_LAST_SET = 0x00000004
WAIT_OBJECT_0 = 0x00000000


class WinRegStore(NodeStore):
    """A NodeStore over ``winreg``. Only usable on Windows."""

    def __init__(self):
        if sys.platform != "win32":
            raise ConfigError(
                "The live registry is only available on Windows",
                remediation="Pass --store-file with a YAML snapshot instead",
            )
        import winreg
        self._winreg = winreg
        self._hives = {hive: getattr(winreg, hive.name) for hive in Hive}
        self._access = {
            AccessMode.ENUMERATE: winreg.KEY_ENUMERATE_SUB_KEYS,
            AccessMode.READ: winreg.KEY_READ,
            AccessMode.WRITE: winreg.KEY_WRITE,
            AccessMode.NOTIFY: winreg.KEY_NOTIFY,
        }

    def _value_type(self, value: RegValue) -> int:
        return getattr(self._winreg, value.type.value)

    def open_node(self, root: NodeRoot, path: RegPath, access: AccessMode) -> Any:
        label = root.describe(path)
        try:
            return self._winreg.OpenKey(
                self._hives[root.hive], str(root.resolve(path)), 0, self._access[access]
            )
        except OSError as e:
            logger.debug("Cannot open %s: %s", label, e)
            raise NodeUnreachableError("Cannot open key", path=label, details=str(e))

    def close_node(self, handle: Any) -> None:
        try:
            self._winreg.CloseKey(handle)
        except OSError as e:
            logger.debug("CloseKey failed: %s", e)

    def enumerate_child(self, handle: Any, index: int) -> Optional[str]:
        try:
            return self._winreg.EnumKey(handle, index)
        except OSError as e:
            # ERROR_NO_MORE_ITEMS
            if getattr(e, "winerror", None) == 259:
                return None
            raise NodeUnreachableError("Cannot enumerate key", details=str(e))

    def create_node(self, root: NodeRoot, path: RegPath) -> bool:
        label = root.describe(path)
        hive = self._hives[root.hive]
        sub_key = str(root.resolve(path))
        try:
            existing = self._winreg.OpenKey(hive, sub_key, 0, self._winreg.KEY_READ)
        except OSError:
            existing = None
        if existing is not None:
            self._winreg.CloseKey(existing)
            return False
        try:
            handle = self._winreg.CreateKeyEx(hive, sub_key, 0, self._winreg.KEY_READ)
        except OSError as e:
            raise NodeUnreachableError("Cannot create key", path=label, details=str(e))
        self._winreg.CloseKey(handle)
        return True

    def set_value(self, root: NodeRoot, path: RegPath, value: RegValue) -> None:
        data = value.data
        # winreg only converts string types it knows; links go in as raw UTF-16
        if value.type == ValueType.REG_LINK and isinstance(data, str):
            data = data.encode("utf-16-le")
        with self.opened(root, path, AccessMode.WRITE) as handle:
            try:
                self._winreg.SetValueEx(handle, value.name, 0, self._value_type(value), data)
            except OSError as e:
                raise NodeUnreachableError(
                    f"Cannot set value '{value.name}'",
                    path=root.describe(path),
                    details=str(e),
                )

    def watch_for_changes(
        self,
        root: NodeRoot,
        path: RegPath,
        watch_subtree: bool = True,
        timeout: Optional[float] = None,
    ) -> bool:
        import ctypes

        advapi32 = ctypes.windll.advapi32
        kernel32 = ctypes.windll.kernel32
        notify_filter = REG_NOTIFY_CHANGE_NAME | REG_NOTIFY_CHANGE_LAST_SET

        with self.opened(root, path, AccessMode.NOTIFY) as handle:
            raw_key = ctypes.c_void_p(int(handle))
            if timeout is None:
                status = advapi32.RegNotifyChangeKeyValue(
                    raw_key, bool(watch_subtree), notify_filter, None, False
                )
                if status != 0:
                    raise NodeUnreachableError(
                        "Cannot watch key", path=root.describe(path), details=f"error {status}"
                    )
                return True

            event = kernel32.CreateEventW(None, True, False, None)
            if not event:
                raise NodeUnreachableError("Cannot create a change event", path=root.describe(path))
            try:
                status = advapi32.RegNotifyChangeKeyValue(
                    raw_key, bool(watch_subtree), notify_filter, event, True
                )
                if status != 0:
                    raise NodeUnreachableError(
                        "Cannot watch key", path=root.describe(path), details=f"error {status}"
                    )
                waited = kernel32.WaitForSingleObject(event, int(timeout * 1000))
                return waited == WAIT_OBJECT_0
            finally:
                kernel32.CloseHandle(event)
