"""
Tests for ServiceResult and BaseService.
"""

import pytest

from core.exceptions import ConflictError
from core.services import BaseService, ServiceResult


class TestServiceResult:
    def test_success_is_truthy(self):
        result = ServiceResult.success(42)

        assert result
        assert result.data == 42
        assert result.to_response() == {"success": True, "data": 42}

    def test_failure_response(self):
        result = ServiceResult.failure(
            "message cannot be empty",
            error_code="EMPTY_CONTENT",
            errors={"content": ["This field may not be blank."]},
        )

        assert not result
        assert result.to_response() == {
            "success": False,
            "error": "message cannot be empty",
            "error_code": "EMPTY_CONTENT",
            "errors": {"content": ["This field may not be blank."]},
        }

    def test_from_application_error_keeps_code(self):
        error = ConflictError("duplicate", error_code="CHAT_ALREADY_EXISTS")

        result = ServiceResult.from_exception(error)

        assert result.error == "duplicate"
        assert result.error_code == "CHAT_ALREADY_EXISTS"

    def test_from_plain_exception_uses_class_name(self):
        result = ServiceResult.from_exception(KeyError("x"))

        assert result.error_code == "KEYERROR"


class ExampleService(BaseService):
    pass


class TestBaseService:
    def test_logger_named_after_service(self):
        assert ExampleService.get_logger().name == (
            "core.tests.test_services.ExampleService"
        )

    def test_atomic_rolls_back_on_error(self, db):
        from authentication.models import User

        with pytest.raises(RuntimeError), ExampleService.atomic():
            User.objects.create_user(
                email="rollback@example.com",
                password="x",
                first_name="A",
                last_name="B",
            )
            raise RuntimeError("boom")

        assert not User.objects.filter(email="rollback@example.com").exists()


class TestCoreExports:
    def test_exception_exports_match_hierarchy(self):
        import core
        from core.exceptions import BaseApplicationError

        exported = {
            name
            for name in core.__all__
            if isinstance(getattr(core, name), type)
            and issubclass(getattr(core, name), BaseApplicationError)
        }

        assert exported == {
            "BaseApplicationError",
            "ValidationError",
            "AuthenticationError",
            "ConflictError",
        }
