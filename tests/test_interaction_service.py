"""
Tests for interaction_service.py - the like/view workflow.
"""

import asyncio
import threading

import pytest

from content_share_api.app.core.errors import Conflict, NotFound, StorageError
from content_share_api.app.schemas.interaction import (
    AddToSet,
    InteractionKind,
    InteractionState,
    ResourceKind,
)


class TestRecordLike:
    """Test the like workflow on jobs."""

    def test_like_succeeds(self, interactions, job, bob):
        result = asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        assert result.state is InteractionState.DONE
        assert result.resource.likes_count == 1
        assert result.resource.liked_by == [bob.id]

    def test_second_like_conflicts_and_counts_once(self, interactions, job_store, job, bob):
        """Test success then Conflict, counter up by exactly one."""
        asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        with pytest.raises(Conflict, match="Job already liked"):
            asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        assert job_store.get_by_id(job.id).likes_count == 1

    def test_like_links_user(self, interactions, job_store, user_store, job, bob):
        asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        assert user_store.exists_with_interaction(bob.id, job.id, "liked_jobs")
        assert bob.id in job_store.get_by_id(job.id).liked_by
        assert user_store.get_by_id(bob.id).liked_jobs == [job.id]

    def test_like_missing_resource_is_not_found(self, interactions, user_store, bob):
        """Test NotFound leaves the user's sets untouched."""
        with pytest.raises(NotFound, match="Job not found"):
            asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, "missing"))

        user = user_store.get_by_id(bob.id)
        assert user.liked_jobs == []
        assert user.liked_posts == []

    def test_likes_from_different_users_accumulate(self, interactions, job_store, job, alice, bob):
        asyncio.run(interactions.record_like(ResourceKind.JOB, alice.id, job.id))
        asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        stored = job_store.get_by_id(job.id)
        assert stored.likes_count == 2
        assert stored.liked_by == [alice.id, bob.id]

    def test_like_and_view_are_independent(self, interactions, job_store, job, bob):
        asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))
        asyncio.run(interactions.record_view(ResourceKind.JOB, bob.id, job.id))

        stored = job_store.get_by_id(job.id)
        assert stored.likes_count == 1
        assert stored.views_count == 1


class TestRecordView:
    """Test the view workflow on posts."""

    def test_view_post_twice(self, interactions, post_store, user_store, post, bob):
        result = asyncio.run(interactions.record_view(ResourceKind.POST, bob.id, post.id))
        assert result.resource.views_count == 1

        with pytest.raises(Conflict, match="Post already viewed"):
            asyncio.run(interactions.record_view(ResourceKind.POST, bob.id, post.id))

        assert post_store.get_by_id(post.id).views_count == 1
        assert user_store.get_by_id(bob.id).viewed_posts == [post.id]

    def test_job_interaction_does_not_affect_posts(self, interactions, user_store, job, post, bob):
        asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        assert not user_store.exists_with_interaction(bob.id, job.id, "liked_posts")
        result = asyncio.run(interactions.record_like(ResourceKind.POST, bob.id, post.id))
        assert result.state is InteractionState.DONE

    def test_view_missing_post(self, interactions, bob):
        with pytest.raises(NotFound):
            asyncio.run(interactions.record(ResourceKind.POST, InteractionKind.VIEW, bob.id, "nope"))


class TestRaceAndPartialFailure:
    """Test the conditional patch and the unlinked back-reference path."""

    def test_member_added_after_check_is_conflict(self, interactions, job_store, user_store, job, bob):
        """Test that a concurrent winner between check and patch is detected."""
        # Another request already counted bob but has not linked him yet.
        job_store.patch_by_id(job.id, AddToSet("liked_by", bob.id, counter="likes_count"))

        with pytest.raises(Conflict):
            asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        assert job_store.get_by_id(job.id).likes_count == 1
        assert user_store.exists_with_interaction(bob.id, job.id, "liked_jobs")

    def test_link_failure_surfaces_storage_error(self, interactions, job_store, user_store, job, bob, monkeypatch):
        """Test that the counter stays applied when the user link fails."""
        def failing_patch(user_id, patch):
            raise StorageError("disk I/O error")

        monkeypatch.setattr(user_store, "patch_by_id", failing_patch)

        with pytest.raises(StorageError):
            asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        assert job_store.get_by_id(job.id).likes_count == 1
        assert not user_store.exists_with_interaction(bob.id, job.id, "liked_jobs")

    def test_retry_after_link_failure_repairs_back_reference(
        self, interactions, job_store, user_store, job, bob, monkeypatch
    ):
        original = user_store.patch_by_id

        def failing_patch(user_id, patch):
            raise StorageError("disk I/O error")

        monkeypatch.setattr(user_store, "patch_by_id", failing_patch)
        with pytest.raises(StorageError):
            asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))
        monkeypatch.setattr(user_store, "patch_by_id", original)

        with pytest.raises(Conflict):
            asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        assert job_store.get_by_id(job.id).likes_count == 1
        assert user_store.exists_with_interaction(bob.id, job.id, "liked_jobs")

    def test_unknown_users_leave_resource_untouched(self, interactions, job_store, job):
        """Test that likes and views by unknown users never reach the counter."""
        for i in range(5):
            with pytest.raises(NotFound, match="User not found"):
                asyncio.run(interactions.record_like(ResourceKind.JOB, f"ghost{i}", job.id))
            with pytest.raises(NotFound, match="User not found"):
                asyncio.run(interactions.record_view(ResourceKind.JOB, f"ghost{i}", job.id))

        stored = job_store.get_by_id(job.id)
        assert stored.likes_count == 0
        assert stored.views_count == 0
        assert stored.liked_by == []
        assert stored.viewed_by == []

    def test_unknown_user_on_missing_resource_is_user_not_found(self, interactions):
        with pytest.raises(NotFound, match="User not found"):
            asyncio.run(interactions.record_like(ResourceKind.POST, "ghost", "missing"))

    def test_user_removed_after_check_is_storage_error(self, interactions, job_store, user_store, job, bob, monkeypatch):
        """Test that a user vanishing between check and link surfaces as StorageError."""
        monkeypatch.setattr(user_store, "patch_by_id", lambda user_id, patch: None)

        with pytest.raises(StorageError):
            asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))

        assert job_store.get_by_id(job.id).likes_count == 1

    def test_concurrent_likes_count_once(self, interactions, job_store, user_store, job, bob):
        """Test that parallel likes by one user increment the counter once."""
        outcomes = []
        lock = threading.Lock()
        start = threading.Barrier(6)

        def worker():
            start.wait()
            try:
                asyncio.run(interactions.record_like(ResourceKind.JOB, bob.id, job.id))
                outcome = "ok"
            except Conflict:
                outcome = "conflict"
            with lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(outcomes) == ["conflict"] * 5 + ["ok"]
        stored = job_store.get_by_id(job.id)
        assert stored.likes_count == 1
        assert stored.liked_by == [bob.id]
        assert user_store.get_by_id(bob.id).liked_jobs == [job.id]
