"""
Tests for user_store.py - users and their interaction back-references.
"""

import pytest

from content_share_api.app.core.errors import Conflict, ValidationError
from content_share_api.app.schemas.interaction import AddToSet


class TestCreateUser:

    def test_create_user(self, user_store):
        user = user_store.create({"name": " Carol ", "email": "Carol@Example.com"})

        assert user.id
        assert user.name == "Carol"
        assert user.email == "carol@example.com"
        assert user.role == "user"
        assert user.liked_jobs == []
        assert user.viewed_posts == []

    def test_duplicate_email_conflicts(self, user_store, alice):
        with pytest.raises(Conflict):
            user_store.create({"name": "Other", "email": "ALICE@example.com"})

    def test_invalid_email_rejected(self, user_store):
        with pytest.raises(ValidationError):
            user_store.create({"name": "Dan", "email": "not-an-email"})

    def test_unknown_role_rejected(self, user_store):
        with pytest.raises(ValidationError):
            user_store.create({"name": "Eve", "email": "eve@example.com", "role": "root"})

    def test_get_missing_user_returns_none(self, user_store):
        assert user_store.get_by_id("nobody") is None

    def test_exists(self, user_store, alice):
        assert user_store.exists(alice.id)
        assert not user_store.exists("nobody")


class TestInteractionSets:

    def test_exists_false_before_patch(self, user_store, alice):
        assert user_store.exists_with_interaction(alice.id, "job-1", "liked_jobs") is False

    def test_patch_then_exists(self, user_store, alice):
        result = user_store.patch_by_id(alice.id, AddToSet("liked_jobs", "job-1"))

        assert result.modified is True
        assert result.record.liked_jobs == ["job-1"]
        assert user_store.exists_with_interaction(alice.id, "job-1", "liked_jobs") is True

    def test_sets_are_independent(self, user_store, alice):
        user_store.patch_by_id(alice.id, AddToSet("liked_jobs", "r1"))

        assert user_store.exists_with_interaction(alice.id, "r1", "viewed_jobs") is False
        assert user_store.exists_with_interaction(alice.id, "r1", "liked_posts") is False

    def test_sets_are_per_user(self, user_store, alice, bob):
        user_store.patch_by_id(alice.id, AddToSet("viewed_posts", "p1"))

        assert user_store.exists_with_interaction(bob.id, "p1", "viewed_posts") is False

    def test_patch_is_idempotent(self, user_store, alice):
        user_store.patch_by_id(alice.id, AddToSet("viewed_posts", "p1"))

        result = user_store.patch_by_id(alice.id, AddToSet("viewed_posts", "p1"))

        assert result.modified is False
        assert result.record.viewed_posts == ["p1"]

    def test_patch_missing_user_returns_none(self, user_store):
        assert user_store.patch_by_id("nobody", AddToSet("liked_jobs", "j1")) is None

    def test_unknown_field_rejected(self, user_store, alice):
        with pytest.raises(ValueError):
            user_store.exists_with_interaction(alice.id, "j1", "bookmarked_jobs")
        with pytest.raises(ValueError):
            user_store.patch_by_id(alice.id, AddToSet("bookmarked_jobs", "j1"))

    def test_counter_not_allowed(self, user_store, alice):
        with pytest.raises(ValueError):
            user_store.patch_by_id(alice.id, AddToSet("liked_jobs", "j1", counter="likes_count"))
