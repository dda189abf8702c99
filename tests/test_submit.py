from conftest import FakeClient, engine_for, make_descriptor

from vs_tool.pricing import Catalog
from vs_tool.submit import Outcome, Submission, SubmissionState, redacted_manifest


def submission(responses, statuses=None):
    engine, prompter = engine_for(responses)
    client = FakeClient(statuses=statuses or [201])
    return Submission(make_descriptor(), client, engine, Catalog()), client, prompter


class TestSubmission:
    def test_declined_is_not_submitted(self):
        sub, client, _ = submission([False])
        assert sub.run() is Outcome.NOT_SUBMITTED
        assert client.created == []
        assert sub.state is SubmissionState.DONE

    def test_created(self):
        sub, client, prompter = submission([True])
        assert sub.run() is Outcome.CREATED
        assert client.created == [make_descriptor().to_manifest()]
        assert sub.attempts == 1
        assert prompter.asked[0].message == "Please confirm the Virtual Server spec above."

    def test_unexpected_status_then_retry_succeeds(self):
        sub, client, prompter = submission([True, True], statuses=[500, 201])
        assert sub.run() is Outcome.CREATED
        assert sub.attempts == 2
        assert len(client.created) == 2
        assert prompter.asked[1].message == "Try again?"

    def test_exception_then_give_up(self):
        sub, client, _ = submission([True, True, False], statuses=[RuntimeError("conflict")])
        assert sub.run() is Outcome.FAILED
        assert sub.attempts == 2
        assert str(sub.last_error) == "conflict"

    def test_retry_submits_the_same_manifest(self):
        sub, client, _ = submission([True, True], statuses=[409, 201])
        sub.run()
        assert client.created[0] == client.created[1]


def test_redacted_manifest_masks_passwords():
    descriptor = make_descriptor()
    manifest = redacted_manifest(descriptor)
    assert manifest["spec"]["users"] == [{"username": "alice", "password": "********"}]
    assert descriptor.users[0].password == "pw"
