"""Account registration, profile updates, admin search and CSV export."""
import csv
import io

import pytest

from app.core.exceptions import BadRequestError, ConflictError
from app.core.security import verify_password
from app.models.enums import Gender, UserRole
from app.models.city import City
from app.schemas.user_schemas import UserCreate, UserUpdate
from app.services.registration_service import RegistrationService
from app.services.user_service import UserService
from tests.conftest import principal_for


def new_user(**overrides):
    payload = {
        "first_name": "Rosa",
        "last_name": "Parks",
        "email": "Rosa@Example.com",
        "password": "secret123",
        "age": 30,
        "gender": "female",
    }
    payload.update(overrides)
    return UserCreate(**payload)


class TestRegisterUser:

    async def test_creates_student_with_hashed_password(self, db):
        user = await UserService(db).register_user(new_user())

        assert user.email == "rosa@example.com"
        assert user.role == UserRole.STUDENT
        assert user.password_hash != "secret123"
        assert verify_password("secret123", user.password_hash)

    async def test_short_password(self, db):
        with pytest.raises(BadRequestError):
            await UserService(db).register_user(new_user(password="abc"))

    async def test_email_is_unique_ignoring_case(self, db, make_user):
        await make_user(email="rosa@example.com")

        with pytest.raises(ConflictError):
            await UserService(db).register_user(new_user(email="ROSA@example.com"))

    async def test_unknown_city(self, db):
        import uuid

        with pytest.raises(BadRequestError):
            await UserService(db).register_user(new_user(city_id=uuid.uuid4()))


class TestProfile:

    async def test_update_profile_fields(self, db, make_user):
        user = await make_user()

        updated = await UserService(db).update_profile(principal_for(user), UserUpdate(phone="555-0100", age=31))

        assert updated.phone == "555-0100"
        assert updated.age == 31

    async def test_email_taken_by_someone_else(self, db, make_user):
        await make_user(email="taken@example.com")
        user = await make_user()

        with pytest.raises(ConflictError):
            await UserService(db).update_profile(principal_for(user), UserUpdate(email="Taken@example.com"))

    async def test_new_password_is_validated(self, db, make_user):
        user = await make_user()

        with pytest.raises(BadRequestError):
            await UserService(db).update_profile(principal_for(user), UserUpdate(password="123"))


class TestAdminQueries:

    async def test_filter_users(self, db, make_user):
        await make_user(first_name="Maya", age=22, gender=Gender.FEMALE)
        await make_user(first_name="Omar", age=41, gender=Gender.MALE)
        await make_user(first_name="Staff", role=UserRole.ADMIN, age=50)
        service = UserService(db)

        assert {u.first_name for u in await service.filter_users(role=UserRole.STUDENT)} == {"Maya", "Omar"}
        assert {u.first_name for u in await service.filter_users(min_age=40)} == {"Omar", "Staff"}
        assert {u.first_name for u in await service.filter_users(search="may")} == {"Maya"}
        assert {u.first_name for u in await service.filter_users(gender=Gender.MALE)} == {"Omar"}

    async def test_export_students_csv(self, db, make_user, make_class):
        city = City(name="Austin", image_url="https://img.example.com/austin.jpg")
        db.add(city)
        await db.commit()
        student = await make_user(first_name="Lena", last_name="Ortiz")
        student.city_id = city.id
        await db.commit()
        await make_user(first_name="Admin", role=UserRole.ADMIN)
        class_obj = await make_class()
        await RegistrationService(db).create_registration(principal_for(student), class_obj.id)

        content = await UserService(db).export_students_csv()
        rows = list(csv.DictReader(io.StringIO(content)))

        assert len(rows) == 1
        assert rows[0]["first_name"] == "Lena"
        assert rows[0]["city"] == "Austin"
        assert rows[0]["active_registrations"] == "1"
