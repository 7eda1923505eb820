from datetime import datetime

import pytest

from wanderai.core.errors import PersistenceUnavailableError
from wanderai.models.domain import ChatMessage, ItineraryDraft
from wanderai.services.chat import ChatTranscriptStore
from wanderai.services.itineraries import ItineraryRepository, itineraries_key

EMAIL = "traveler@example.com"


@pytest.fixture
def repo(store):
    return ItineraryRepository(store)


def make_draft(destination="Kyoto", content="Day 1: Temples\n- Kinkaku-ji"):
    return ItineraryDraft(
        destination=destination,
        content=content,
        currency="JPY",
        budget_amount=150000,
        duration=3,
        interests="temples and food",
    )


def test_list_is_empty_for_new_user(repo):
    assert repo.list(EMAIL) == []
    assert repo.list("") == []


def test_save_assigns_id_and_date(repo):
    record = repo.save(EMAIL, make_draft())

    assert record.id
    assert datetime.fromisoformat(record.generated_date)
    assert record.destination == "Kyoto"
    assert record.budget_amount == 150000


def test_save_then_list_newest_first(repo):
    first = repo.save(EMAIL, make_draft("Kyoto", "first plan"))
    second = repo.save(EMAIL, make_draft("Osaka", "second plan"))

    listed = repo.list(EMAIL)
    assert [r.id for r in listed] == [second.id, first.id]
    assert listed[0].destination == "Osaka"
    assert listed[0].content == "second plan"
    assert listed[1].content == "first plan"


def test_itineraries_are_partitioned_by_user(repo):
    repo.save(EMAIL, make_draft())
    assert repo.list("someone@example.com") == []


def test_stored_json_uses_camel_case(repo, store):
    repo.save(EMAIL, make_draft())
    stored = store.get_json(itineraries_key(EMAIL))[0]
    assert {"id", "destination", "generatedDate", "content", "budgetAmount"} <= set(stored)


def test_save_requires_email(repo):
    with pytest.raises(PersistenceUnavailableError):
        repo.save("", make_draft())


def test_save_requires_storage(offline_store):
    with pytest.raises(PersistenceUnavailableError):
        ItineraryRepository(offline_store).save(EMAIL, make_draft())


def test_delete_is_idempotent(repo):
    keep = repo.save(EMAIL, make_draft("Kyoto"))
    drop = repo.save(EMAIL, make_draft("Osaka"))

    repo.delete(EMAIL, drop.id)
    after_once = repo.list(EMAIL)
    repo.delete(EMAIL, drop.id)

    assert repo.list(EMAIL) == after_once
    assert [r.id for r in after_once] == [keep.id]


def test_delete_cascades_to_chat(repo, store):
    record = repo.save(EMAIL, make_draft())
    chats = ChatTranscriptStore(store)
    chats.save(
        EMAIL,
        record.id,
        [
            ChatMessage(role="user", content="Is Day 1 too busy?"),
            ChatMessage(role="model", content="It is manageable."),
        ],
    )

    repo.delete(EMAIL, record.id)

    assert repo.get(EMAIL, record.id) is None
    assert chats.load(EMAIL, record.id) == []


def test_delete_all_clears_history_and_chats(repo, store):
    chats = ChatTranscriptStore(store)
    records = [repo.save(EMAIL, make_draft()) for _ in range(3)]
    for record in records:
        chats.append(EMAIL, record.id, ChatMessage(role="user", content="hello"))
    other = repo.save("other@example.com", make_draft())
    chats.append("other@example.com", other.id, ChatMessage(role="user", content="hi"))

    repo.delete_all(EMAIL)

    assert repo.list(EMAIL) == []
    assert all(chats.load(EMAIL, r.id) == [] for r in records)
    assert len(repo.list("other@example.com")) == 1
    assert len(chats.load("other@example.com", other.id)) == 1


def test_corrupt_history_reads_as_empty(repo, store):
    store.set(itineraries_key(EMAIL), '[{"destination": "no id"}]')
    assert repo.list(EMAIL) == []

    store.set(itineraries_key(EMAIL), "{broken")
    assert repo.list(EMAIL) == []


def test_to_draft_replaces_content(repo):
    record = repo.save(EMAIL, make_draft())
    draft = record.to_draft(content="refined plan")
    assert draft.content == "refined plan"
    assert draft.destination == record.destination
    assert draft.currency == "JPY"
