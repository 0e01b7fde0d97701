"""
Profile and avatar tests.
"""

import io
import os
import re

import pytest

from mercato.extensions import db
from mercato.models import User
from mercato.permissions import SystemRole
from mercato.services import user_service
from mercato.validation import ConflictError, ValidationError


class TestUpdateProfile:

    def test_patch_semantics(self, make_user, as_actor):
        user = make_user(
            SystemRole.CUSTOMER,
            email="old@example.com",
            phone="555-0100",
        )

        updated = user_service.update_profile(
            as_actor(user), {"email": "new@example.com", "phone": None, "profile": {"city": "Porto"}}
        )

        assert updated.email == "new@example.com"
        assert updated.phone is None
        assert updated.profile.city == "Porto"
        assert updated.profile.name is None

    def test_profile_is_updated_in_place(self, customer, as_actor):
        user_service.update_profile(as_actor(customer), {"profile": {"name": "Ana", "city": "Porto"}})
        updated = user_service.update_profile(as_actor(customer), {"profile": {"city": "Braga"}})

        assert updated.profile.name == "Ana"
        assert updated.profile.city == "Braga"

    def test_username_must_stay_unique(self, customer, retailer, as_actor):
        with pytest.raises(ConflictError):
            user_service.update_profile(as_actor(customer), {"username": retailer.username})

    @pytest.mark.parametrize(
        "payload",
        [
            {"role_id": 1},
            {"password_hash": "x"},
            {"username": None},
            {"username": "   "},
            {"profile": None},
            {"profile": {"user_id": 3}},
            {"email": "x" * 256},
        ],
    )
    def test_rejected_fields(self, customer, as_actor, payload):
        with pytest.raises(ValidationError):
            user_service.update_profile(as_actor(customer), payload)

    def test_patch_over_http(self, client, customer, headers_for):
        resp = client.patch(
            "/api/users/me",
            headers=headers_for(customer),
            json={"profile": {"country": "PT"}},
        )

        assert resp.status_code == 200
        assert resp.get_json()["profile"]["country"] == "PT"


class TestAvatarUpload:

    def _upload(self, client, headers, content=b"\x89PNG fake image", filename="my photo.png"):
        return client.put(
            "/api/users/me/avatar",
            headers=headers,
            data={"profilePicture": (io.BytesIO(content), filename)},
            content_type="multipart/form-data",
        )

    def test_stores_file_and_path(self, client, customer, headers_for):
        resp = self._upload(client, headers_for(customer))

        assert resp.status_code == 200
        path = resp.get_json()["profile_picture"]
        assert re.fullmatch(rf"/uploads/avatars/{customer.id}-\d+-my-photo\.png", path)

        stored = os.path.join(user_service.avatar_directory(), path.rsplit("/", 1)[1])
        with open(stored, "rb") as fh:
            assert fh.read() == b"\x89PNG fake image"

        served = client.get(path)
        assert served.status_code == 200
        assert served.data == b"\x89PNG fake image"

    def test_replacing_removes_old_file(self, client, customer, headers_for):
        headers = headers_for(customer)
        first = self._upload(client, headers, filename="a.png").get_json()["profile_picture"]
        second = self._upload(client, headers, filename="b.png").get_json()["profile_picture"]

        directory = user_service.avatar_directory()
        assert not os.path.exists(os.path.join(directory, first.rsplit("/", 1)[1]))
        assert os.path.exists(os.path.join(directory, second.rsplit("/", 1)[1]))

    def test_missing_and_empty_files(self, client, customer, headers_for):
        headers = headers_for(customer)

        assert client.put("/api/users/me/avatar", headers=headers, data={}).status_code == 400
        assert self._upload(client, headers, content=b"").status_code == 400

    def test_too_large(self, app, customer, as_actor, monkeypatch):
        monkeypatch.setitem(app.config, "MAX_AVATAR_BYTES", 4)
        with pytest.raises(ValidationError):
            user_service.upload_avatar(as_actor(customer), "big.png", b"12345")

        db.session.expire_all()
        assert db.session.get(User, customer.id).profile_picture_path is None

    def test_unsafe_names_are_sanitized(self, customer, as_actor):
        user = user_service.upload_avatar(as_actor(customer), "../../etc/passwd", b"data")

        filename = user.profile_picture_path.rsplit("/", 1)[1]
        assert "/" not in filename
        assert ".." not in filename
        assert filename.endswith("etc_passwd")
