import datetime
import sqlite3

from catbar.database import DatabaseManager, MemoryStore, open_store
from catbar.satiety import SatietyEngine
from conftest import FakeClock


def test_values_round_trip(tmp_path):
    db = DatabaseManager(str(tmp_path / "catbar.db"))
    db.set_many({
        "satiety": 42.5,
        "unlockedCompanions": ["black", "orange"],
        "notificationEnabled": False,
        "lastFocusDate": None,
    })
    assert db.get("satiety") == 42.5
    assert db.get("unlockedCompanions") == ["black", "orange"]
    assert db.get("notificationEnabled") is False
    assert db.get("lastFocusDate") is None
    assert db.get("missing", "fallback") == "fallback"
    db.close()


def test_values_survive_reopening(tmp_path):
    path = str(tmp_path / "catbar.db")
    db = DatabaseManager(path)
    db.set("totalPomodoros", 7)
    db.close()
    again = DatabaseManager(path)
    assert again.get("totalPomodoros") == 7
    assert again.keys() == ["totalPomodoros"]
    again.close()


def test_malformed_row_reads_as_default(tmp_path):
    path = str(tmp_path / "catbar.db")
    db = DatabaseManager(path)
    db.conn.execute("INSERT INTO kv_store (key, value, updated) VALUES ('satiety', '{not json', 0)")
    db.conn.commit()
    assert db.get("satiety", 100.0) == 100.0
    db.close()


def test_legacy_keys_are_migrated(tmp_path):
    path = str(tmp_path / "catbar.db")
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE kv_store (key TEXT PRIMARY KEY, value TEXT NOT NULL, updated REAL)")
    conn.execute("""INSERT INTO kv_store VALUES ('currentCat', '"黑猫"', 0)""")
    conn.commit()
    conn.close()

    db = DatabaseManager(path)
    assert db.get("currentCat") is None
    assert db.get("currentCompanion") == "黑猫"
    db.close()


def test_failed_write_is_reported_not_raised(tmp_path, capsys):
    db = DatabaseManager(str(tmp_path / "catbar.db"))
    db.close()
    assert db.set("satiety", 10.0) is False
    assert "Warning" in capsys.readouterr().out


def test_unserializable_value_is_rejected(tmp_path):
    db = DatabaseManager(str(tmp_path / "catbar.db"))
    assert db.set("when", datetime.datetime.now()) is False
    assert MemoryStore().set("when", datetime.datetime.now()) is False
    db.close()


def test_open_store_falls_back_to_memory(tmp_path):
    store = open_store(str(tmp_path / "no" / "such" / "dir" / "catbar.db"))
    assert isinstance(store, MemoryStore)


def test_engine_state_survives_restart(tmp_path):
    path = str(tmp_path / "catbar.db")
    clock = FakeClock()
    db = DatabaseManager(path)
    engine = SatietyEngine(db, clock)
    engine.load()
    engine.set_satiety(60.0)
    engine.complete_focus(5 * 60)
    engine.feed()
    engine.select_companion("black")
    db.close()

    clock.advance(minutes=10)
    db = DatabaseManager(path)
    restored = SatietyEngine(db, clock)
    restored.load()
    assert restored.satiety == 95.0
    assert restored.current_companion.value == "black"
    assert restored.total_focus_minutes == 300
    assert restored.total_pomodoros == 1
    assert restored.streak_days == 1
    assert restored.state.last_focus_date == clock.now().date()
    assert restored.pending_food is False
    db.close()
