from app.core.exceptions import AppError, PersistenceError, ResourceNotFoundError, SchedulerError


def test_scheduler_error_structure():
    err = SchedulerError(message="Unknown scheduling phase", details={"phases": ["shuffle"]})
    assert err.status_code == 400
    assert err.message == "Unknown scheduling phase"
    assert err.details == {"phases": ["shuffle"]}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_persistence_error_carries_batch_scope():
    err = PersistenceError("3", "CSE-A", "disk full")
    assert err.status_code == 500
    assert err.details == {"semester": "3", "batch": "CSE-A", "reason": "disk full"}
    assert "CSE-A" in err.message


def test_resource_not_found_message():
    err = ResourceNotFoundError("Timetable", "abc")
    assert err.status_code == 404
    assert err.message == "Timetable with id abc not found"
