import concurrent.futures
import json

import pytest

import classrepo_plug as plug

from _classrepo import exception
from _classrepo.provisioning.records import (
    JSONRecordStore,
    ProvisioningRecord,
    validate_record,
)

import constants


def make_record(**kwargs):
    values = dict(
        organization=constants.ORG_NAME,
        assignment_slug=constants.ASSIGNMENT_SLUG,
        user_login="alice",
        repo_id=1234,
        repo_node_id="R_1234",
        repo_name="task-1-alice",
    )
    values.update(kwargs)
    return ProvisioningRecord(**values)


class TestProvisioningRecord:
    def test_build_from_request_and_repo(self, private_assignment, student):
        repo = plug.RemoteRepo(
            id=99,
            node_id="MDEwOlJlcG9zaXRvcnk5OQ==",
            name="task-1-alice",
            full_name=f"{constants.ORG_NAME}/task-1-alice",
            private=True,
            url="https://github.com/test-org/task-1-alice",
        )
        request = plug.ProvisioningRequest(private_assignment, student)

        record = ProvisioningRecord.build(request, repo)

        assert record.key == (
            constants.ORG_NAME,
            constants.ASSIGNMENT_SLUG,
            "alice",
        )
        assert record.repo_id == 99
        assert record.repo_node_id == "MDEwOlJlcG9zaXRvcnk5OQ=="
        assert record.repo_name == "task-1-alice"
        assert record.created_at

    def test_dict_conversion_preserves_fields(self):
        record = make_record()
        assert ProvisioningRecord.from_dict(record.to_dict()) == record


class TestValidateRecord:
    def test_valid_record(self):
        validate_record(make_record())

    @pytest.mark.parametrize(
        "kwargs, error",
        [
            (dict(repo_id=0), "repository id must be a positive integer"),
            (dict(repo_id=-3), "repository id must be a positive integer"),
            (dict(repo_id=True), "repository id must be a positive integer"),
            (dict(repo_id="12"), "repository id must be a positive integer"),
            (dict(repo_node_id=""), "global relay id can't be blank"),
            (dict(assignment_slug=""), "assignment can't be blank"),
            (dict(user_login=""), "user can't be blank"),
            (dict(organization=""), "organization can't be blank"),
        ],
    )
    def test_invalid_record_raises(self, kwargs, error):
        with pytest.raises(exception.RecordValidationError) as exc_info:
            validate_record(make_record(**kwargs))

        assert str(exc_info.value).startswith("Validation failed: ")
        assert error in str(exc_info.value)

    def test_reports_all_errors(self):
        with pytest.raises(exception.RecordValidationError) as exc_info:
            validate_record(make_record(user_login="", repo_node_id=""))

        assert "user can't be blank" in str(exc_info.value)
        assert "global relay id can't be blank" in str(exc_info.value)


class TestJSONRecordStore:
    def test_empty_when_file_missing(self, store):
        assert list(store) == []
        assert len(store) == 0

    def test_save_creates_parent_directories(self, store, records_file):
        store.save(make_record())

        assert records_file.is_file()

    def test_save_and_get(self, store):
        record = make_record()
        store.save(record)

        assert (
            store.get(constants.ORG_NAME, constants.ASSIGNMENT_SLUG, "alice")
            == record
        )
        assert store.get(constants.ORG_NAME, "task-2", "alice") is None

    def test_records_survive_new_store_instance(self, store, records_file):
        record = make_record()
        store.save(record)

        assert list(JSONRecordStore(records_file)) == [record]

    def test_file_format(self, store, records_file):
        record = make_record()
        store.save(record)

        content = json.loads(records_file.read_text(encoding="utf8"))

        assert content == {"records": [record.to_dict()]}

    def test_rejects_second_record_for_same_pair(self, store):
        first = make_record()
        store.save(first)

        with pytest.raises(exception.RecordValidationError) as exc_info:
            store.save(make_record(repo_id=5678, repo_node_id="R_5678"))

        assert "alice already has a repository" in str(exc_info.value)
        assert list(store) == [first]

    def test_same_user_and_assignment_in_other_organization(self, store):
        store.save(make_record())
        store.save(
            make_record(
                organization="other-org", repo_id=5678, repo_node_id="R_5678"
            )
        )

        assert len(store) == 2

    def test_rejects_taken_repo_id(self, store):
        store.save(make_record())

        with pytest.raises(exception.RecordValidationError) as exc_info:
            store.save(make_record(user_login="bob"))

        assert "repository id 1234 has already been taken" in str(
            exc_info.value
        )

    def test_invalid_record_is_not_written(self, store, records_file):
        with pytest.raises(exception.RecordValidationError):
            store.save(make_record(repo_id=0))

        assert not records_file.exists()

    def test_corrupt_file_raises_file_error(self, store, records_file):
        records_file.parent.mkdir(parents=True)
        records_file.write_text("{not json", encoding="utf8")

        with pytest.raises(exception.FileError) as exc_info:
            list(store)

        assert "is corrupt" in str(exc_info.value)

    def test_no_temporary_files_left_behind(self, store, records_file):
        store.save(make_record())
        store.save(
            make_record(user_login="bob", repo_id=2, repo_node_id="R_2")
        )

        assert records_file.is_file()
        assert not list(records_file.parent.glob("*.tmp"))

    def test_concurrent_saves_keep_every_record(self, records_file):
        """Saves from many threads, each with its own store on the same file,
        must not lose each other's records.
        """
        nr_of_records = 40

        def save(i):
            JSONRecordStore(records_file).save(
                make_record(
                    user_login=f"user{i}",
                    repo_id=i + 1,
                    repo_node_id=f"R_{i + 1}",
                    repo_name=f"task-1-user{i}",
                )
            )

        with concurrent.futures.ThreadPoolExecutor(max_workers=8) as pool:
            for future in [
                pool.submit(save, i) for i in range(nr_of_records)
            ]:
                future.result()

        logins = {
            record.user_login for record in JSONRecordStore(records_file)
        }
        assert logins == {f"user{i}" for i in range(nr_of_records)}

    def test_concurrent_saves_of_same_pair_store_one_record(
        self, records_file
    ):
        def save(i):
            try:
                JSONRecordStore(records_file).save(
                    make_record(repo_id=i + 1, repo_node_id=f"R_{i + 1}")
                )
            except exception.RecordValidationError:
                return False
            return True

        with concurrent.futures.ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(save, range(20)))

        assert results.count(True) == 1
        assert len(JSONRecordStore(records_file)) == 1
