from src.attendance_engine.attendance_engine.database.connection import DBConfig


def test_from_mapping_fills_local_defaults():
    config = DBConfig.from_mapping({"password": "secret"})

    assert config == DBConfig(
        host="localhost", port=3306, user="root", password="secret", database="attendance_engine"
    )


def test_from_mapping_coerces_env_strings():
    config = DBConfig.from_mapping(
        {"host": "db", "port": "3307", "user": "engine", "password": "pw", "database": "attendance_engine_test"}
    )

    assert config.port == 3307
    assert config.describe() == "engine@db:3307/attendance_engine_test"
