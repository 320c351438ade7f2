"""Tests for the in-memory CredentialCacher."""

from __future__ import annotations

import threading

import pytest

from credchain.creds import Creds
from credchain.helpers.base import HelperNoOp
from credchain.helpers.cache import CredentialCacher


@pytest.fixture()
def cacher() -> CredentialCacher:
    return CredentialCacher()


class TestFill:
    def test_miss_is_noop(self, cacher: CredentialCacher, query: Creds) -> None:
        with pytest.raises(HelperNoOp):
            cacher.fill(query)

    def test_hit_after_approve(
        self, cacher: CredentialCacher, query: Creds, filled: Creds
    ) -> None:
        with pytest.raises(HelperNoOp):
            cacher.approve(filled)
        assert cacher.fill(query) == filled

    def test_hit_ignores_username_in_query(
        self, cacher: CredentialCacher, filled: Creds
    ) -> None:
        with pytest.raises(HelperNoOp):
            cacher.approve(filled)
        lookup = Creds(protocol="https", host="git.example.com", path="org/repo.git", username="bob")
        assert cacher.fill(lookup) == filled

    def test_different_path_misses(self, cacher: CredentialCacher, filled: Creds) -> None:
        with pytest.raises(HelperNoOp):
            cacher.approve(filled)
        with pytest.raises(HelperNoOp):
            cacher.fill(Creds(protocol="https", host="git.example.com", path="other"))


class TestApprove:
    def test_first_approval_stores_and_defers(
        self, cacher: CredentialCacher, filled: Creds
    ) -> None:
        with pytest.raises(HelperNoOp):
            cacher.approve(filled)
        assert len(cacher) == 1

    def test_repeat_approval_defers_and_keeps_first(
        self, cacher: CredentialCacher, query: Creds, filled: Creds
    ) -> None:
        with pytest.raises(HelperNoOp):
            cacher.approve(filled)

        other = Creds(filled, password="different")
        with pytest.raises(HelperNoOp):
            cacher.approve(other)

        assert len(cacher) == 1

        assert cacher.fill(query)["password"] == "s3cret"

    def test_stored_record_is_a_copy(
        self, cacher: CredentialCacher, query: Creds, filled: Creds
    ) -> None:
        with pytest.raises(HelperNoOp):
            cacher.approve(filled)
        filled["password"] = "mutated"
        assert cacher.fill(query)["password"] == "s3cret"

    def test_filled_record_is_a_copy(
        self, cacher: CredentialCacher, query: Creds, filled: Creds
    ) -> None:
        with pytest.raises(HelperNoOp):
            cacher.approve(filled)
        cacher.fill(query)["password"] = "mutated"
        assert cacher.fill(query)["password"] == "s3cret"


class TestReject:
    def test_removes_entry(
        self, cacher: CredentialCacher, query: Creds, filled: Creds
    ) -> None:
        with pytest.raises(HelperNoOp):
            cacher.approve(filled)
        with pytest.raises(HelperNoOp):
            cacher.reject(filled)
        with pytest.raises(HelperNoOp):
            cacher.fill(query)

    def test_missing_entry_is_noop(self, cacher: CredentialCacher, filled: Creds) -> None:
        with pytest.raises(HelperNoOp):
            cacher.reject(filled)
        assert len(cacher) == 0


class TestConcurrency:
    def test_parallel_approvals_store_one_entry_per_key(self, cacher: CredentialCacher) -> None:
        def worker(n: int) -> None:
            creds = Creds(protocol="https", host=f"host{n % 5}", password=str(n))
            try:
                cacher.approve(creds)
            except HelperNoOp:
                pass

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cacher) == 5
