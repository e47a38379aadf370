from accountech.services.database_service import DatabaseService
from accountech.services.health_service import HealthService
from accountech.utils.constants import HealthStatus


def test_healthy_database_reports_size_and_vouchers(run, database):
    health = run(HealthService(database).check_all())

    assert health["status"] == HealthStatus.HEALTHY
    component = health["components"]["database"]
    assert component["voucher_count"] == 0
    assert component["path"] == database.db_path
    assert "size_bytes" in component


def test_unreadable_database_is_unhealthy(run, tmp_path):
    # A directory cannot be opened as a database file
    broken = DatabaseService(str(tmp_path))

    health = run(HealthService(broken).check_database())
    assert health["status"] == HealthStatus.UNHEALTHY
    assert health["message"]
