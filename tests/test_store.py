"""Tests for node stores."""

import sys

import pytest
import yaml

from reg_inspector.paths import Hive, NodeRoot, RegPath


HKLM = NodeRoot(Hive.HKEY_LOCAL_MACHINE)


class TestMemoryStore:
    """Test the in-memory store."""

    def test_loads_snapshot(self, snapshot_file):
        """Test a YAML snapshot loads with order and values intact."""
        from reg_inspector.store import MemoryStore, ValueType

        store = MemoryStore.from_yaml(snapshot_file)
        software = store.hives[Hive.HKEY_LOCAL_MACHINE].children["SOFTWARE"]
        assert list(software.children) == ["Vendor", "TEST", "Locked"]
        assert software.children["Locked"].denied is True

        version = software.children["Vendor"].values["Version"]
        assert version.type == ValueType.REG_SZ
        assert version.data == "1.0"
        assert software.children["Vendor"].values["Enabled"].data == 1

    def test_to_mapping_matches_source(self, sample_store, snapshot_file):
        """Test serializing gives back the snapshot layout."""
        assert sample_store.to_mapping() == yaml.safe_load(snapshot_file.read_text())

    def test_save_and_reload(self, sample_store, tmp_path):
        """Test a saved snapshot reloads with new keys and values."""
        from reg_inspector.store import MemoryStore, RegValue, ValueType

        sample_store.create_node(HKLM, RegPath.parse("SOFTWARE\\New"))
        sample_store.set_value(
            HKLM, RegPath.parse("SOFTWARE\\New"), RegValue("Blob", ValueType.REG_BINARY, b"\x00\xff")
        )
        path = tmp_path / "saved.yaml"
        sample_store.save(path)

        data = yaml.safe_load(path.read_text())
        assert data["HKEY_LOCAL_MACHINE"]["SOFTWARE"]["New"]["_values"]["Blob"] == {
            "type": "REG_BINARY",
            "data": "00ff",
        }
        reloaded = MemoryStore.from_yaml(path)
        new = reloaded.hives[Hive.HKEY_LOCAL_MACHINE].children["SOFTWARE"].children["New"]
        assert new.values["Blob"].data == b"\x00\xff"

    def test_short_hive_names_in_snapshot(self):
        """Test snapshots may use HKLM style names."""
        from reg_inspector.store import MemoryStore

        store = MemoryStore.from_mapping({"HKLM": {"SOFTWARE": {}}})
        assert "SOFTWARE" in store.hives[Hive.HKEY_LOCAL_MACHINE].children

    def test_bare_values(self):
        """Test plain scalars infer REG_DWORD or REG_SZ."""
        from reg_inspector.store import MemoryStore, ValueType

        store = MemoryStore.from_mapping({"HKCU": {"K": {"_values": {"n": 5, "s": "text"}}}})
        values = store.hives[Hive.HKEY_CURRENT_USER].children["K"].values
        assert values["n"].type == ValueType.REG_DWORD
        assert values["s"].type == ValueType.REG_SZ

    def test_unknown_hive(self):
        """Test an unknown hive name is a configuration error."""
        from reg_inspector.exceptions import ConfigError
        from reg_inspector.store import MemoryStore

        with pytest.raises(ConfigError):
            MemoryStore.from_mapping({"HKEY_NOWHERE": {}})

    def test_bad_value_type(self):
        """Test an unknown value type is a configuration error."""
        from reg_inspector.exceptions import ConfigError
        from reg_inspector.store import MemoryStore

        with pytest.raises(ConfigError):
            MemoryStore.from_mapping({"HKCU": {"K": {"_values": {"v": {"type": "REG_QWORD"}}}}})

    def test_missing_snapshot(self, tmp_path):
        """Test a missing file raises ConfigError."""
        from reg_inspector.exceptions import ConfigError
        from reg_inspector.store import MemoryStore

        with pytest.raises(ConfigError) as exc_info:
            MemoryStore.from_yaml(tmp_path / "missing.yaml")
        assert "--store-file" in exc_info.value.remediation

    def test_malformed_snapshot(self, tmp_path):
        """Test invalid YAML raises ConfigError."""
        from reg_inspector.exceptions import ConfigError
        from reg_inspector.store import MemoryStore

        path = tmp_path / "bad.yaml"
        path.write_text("HKLM: [unclosed")
        with pytest.raises(ConfigError):
            MemoryStore.from_yaml(path)

    def test_case_insensitive_open(self, sample_store):
        """Test key names match regardless of case."""
        from reg_inspector.store import AccessMode

        with sample_store.opened(HKLM, RegPath.parse("software\\VENDOR"), AccessMode.READ) as handle:
            assert sample_store.enumerate_child(handle, 0) == "TEST"

    def test_missing_key(self, sample_store):
        """Test the error names the first missing segment."""
        from reg_inspector.exceptions import NodeUnreachableError
        from reg_inspector.store import AccessMode

        with pytest.raises(NodeUnreachableError) as exc_info:
            sample_store.open_node(HKLM, RegPath.parse("SOFTWARE\\Nope\\Deeper"), AccessMode.READ)
        assert exc_info.value.path == "HKEY_LOCAL_MACHINE\\SOFTWARE\\Nope"

    def test_denied_key(self, sample_store):
        """Test a denied key cannot be opened."""
        from reg_inspector.exceptions import NodeUnreachableError
        from reg_inspector.store import AccessMode

        with pytest.raises(NodeUnreachableError) as exc_info:
            sample_store.open_node(HKLM, RegPath.parse("SOFTWARE\\Locked"), AccessMode.ENUMERATE)
        assert exc_info.value.message == "Access is denied"

    def test_enumerate_past_end(self, sample_store):
        """Test enumeration ends with None."""
        from reg_inspector.store import AccessMode

        with sample_store.opened(HKLM, RegPath.parse("SOFTWARE\\Vendor\\Plugins"), AccessMode.ENUMERATE) as handle:
            assert sample_store.enumerate_child(handle, 0) == "TESTING"
            assert sample_store.enumerate_child(handle, 1) is None

    def test_closed_handle(self, sample_store):
        """Test a closed handle cannot be enumerated."""
        from reg_inspector.exceptions import NodeUnreachableError
        from reg_inspector.store import AccessMode

        handle = sample_store.open_node(HKLM, RegPath.parse("SOFTWARE"), AccessMode.ENUMERATE)
        sample_store.close_node(handle)
        sample_store.close_node(handle)
        with pytest.raises(NodeUnreachableError):
            sample_store.enumerate_child(handle, 0)

    def test_create_node(self, sample_store):
        """Test creating intermediate keys and detecting existing ones."""
        assert sample_store.create_node(HKLM, RegPath.parse("SOFTWARE\\A\\B")) is True
        assert sample_store.create_node(HKLM, RegPath.parse("SOFTWARE\\A\\B")) is False
        assert sample_store.create_node(HKLM, RegPath.parse("software\\test")) is False
        software = sample_store.hives[Hive.HKEY_LOCAL_MACHINE].children["SOFTWARE"]
        assert list(software.children)[-1] == "A"

    def test_create_hive_rejected(self, sample_store):
        """Test a hive cannot be created."""
        from reg_inspector.exceptions import InvalidArgumentError

        with pytest.raises(InvalidArgumentError):
            sample_store.create_node(HKLM, RegPath())

    def test_create_under_denied(self, sample_store):
        """Test creation below a denied key fails."""
        from reg_inspector.exceptions import NodeUnreachableError

        with pytest.raises(NodeUnreachableError):
            sample_store.create_node(HKLM, RegPath.parse("SOFTWARE\\Locked\\New"))

    def test_set_value_requires_key(self, sample_store):
        """Test values can only be set on existing keys."""
        from reg_inspector.exceptions import NodeUnreachableError
        from reg_inspector.store import RegValue, ValueType

        with pytest.raises(NodeUnreachableError):
            sample_store.set_value(HKLM, RegPath.parse("SOFTWARE\\Nope"), RegValue("v", ValueType.REG_SZ, "x"))

    def test_watch_records_registration(self, sample_store):
        """Test a watch on a snapshot is recorded and reported."""
        assert sample_store.watch_for_changes(HKLM, RegPath.parse("SOFTWARE"), watch_subtree=False)
        assert sample_store.watches == [("HKEY_LOCAL_MACHINE\\SOFTWARE", False)]


class TestOpenStore:
    """Test store selection."""

    def test_snapshot_selects_memory_store(self, snapshot_file):
        """Test a snapshot path opens a MemoryStore."""
        from reg_inspector.store import MemoryStore, open_store

        assert isinstance(open_store(snapshot_file), MemoryStore)

    @pytest.mark.skipif(sys.platform == "win32", reason="live registry is available on Windows")
    def test_live_registry_off_windows(self):
        """Test the live registry is refused away from Windows."""
        from reg_inspector.exceptions import ConfigError
        from reg_inspector.store import open_store

        with pytest.raises(ConfigError) as exc_info:
            open_store()
        assert "--store-file" in exc_info.value.remediation


@pytest.mark.windows
@pytest.mark.skipif(sys.platform != "win32", reason="requires the Windows registry")
class TestWinRegStore:
    """Test the live registry store on a volatile HKCU key."""

    @pytest.fixture
    def store(self):
        import winreg
        from reg_inspector.store.winreg_store import WinRegStore

        yield WinRegStore()
        for name in ("Software\\RegInspectorTest\\Child", "Software\\RegInspectorTest"):
            try:
                winreg.DeleteKey(winreg.HKEY_CURRENT_USER, name)
            except OSError:
                pass

    def test_create_and_enumerate(self, store):
        """Test creating a key and listing it."""
        from reg_inspector.enumerator import list_children

        root = NodeRoot(Hive.HKEY_CURRENT_USER, RegPath.parse("Software\\RegInspectorTest"))
        assert store.create_node(root, RegPath.parse("Child")) is True
        assert store.create_node(root, RegPath.parse("Child")) is False
        assert [str(p) for p in list_children(store, root, RegPath())] == ["Child"]

    def test_watch_times_out(self, store):
        """Test a watch with a timeout returns False when nothing changes."""
        root = NodeRoot(Hive.HKEY_CURRENT_USER, RegPath.parse("Software"))
        store.create_node(root, RegPath.parse("RegInspectorTest"))
        assert store.watch_for_changes(root, RegPath.parse("RegInspectorTest"), timeout=0.2) is False
