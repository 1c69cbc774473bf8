from chatapp.models.domain import ConversationUpdate, MessageUpdate, SettingsUpdate


def _conversation_with_messages(repo, session_id="s1", count=2):
    conversation = repo.create_conversation(session_id, "New Conversation")
    messages = [
        repo.create_message(session_id, conversation.id, "user" if i % 2 == 0 else "assistant", f"m{i}")
        for i in range(count)
    ]
    return conversation, messages


def test_create_conversation_defaults_model_and_timestamps(repo):
    conversation = repo.create_conversation("s1", "New Conversation")

    assert conversation.model == "gemini-1.5-flash"
    assert conversation.session_id == "s1"
    assert conversation.created_at == conversation.updated_at
    assert repo.get_conversation("s1", conversation.id) == conversation


def test_create_conversation_keeps_explicit_model(repo):
    conversation = repo.create_conversation("s1", "Chat", model="gemini-2.5-flash")
    assert conversation.model == "gemini-2.5-flash"


def test_custom_default_model(store):
    from chatapp.services.repository import ConversationRepository

    repo = ConversationRepository(store, default_model="gemini-2.0-flash-exp")
    assert repo.create_conversation("s1", "Chat").model == "gemini-2.0-flash-exp"


def test_cross_session_reads_return_not_found(repo):
    conversation, messages = _conversation_with_messages(repo, "a")

    assert repo.get_conversation("b", conversation.id) is None
    assert repo.list_conversations("b") == []
    assert repo.list_messages("b", conversation.id) == []
    assert repo.get_message("b", messages[0].id) is None
    assert repo.update_conversation("b", conversation.id, {"title": "x"}) is None
    assert repo.update_message("b", messages[0].id, {"is_bookmarked": True}) is None
    assert repo.delete_conversation("b", conversation.id) is False
    # untouched in the owning session
    assert repo.get_conversation("a", conversation.id).title == "New Conversation"
    assert len(repo.list_messages("a", conversation.id)) == 2


def test_list_conversations_most_recent_first(repo):
    first = repo.create_conversation("s1", "first")
    second = repo.create_conversation("s1", "second")
    repo.touch_conversation("s1", first.id)

    ids = [c.id for c in repo.list_conversations("s1")]
    assert ids == [first.id, second.id]


def test_listing_is_stable_between_calls(repo):
    for i in range(5):
        repo.create_conversation("s1", f"c{i}")
    assert [c.id for c in repo.list_conversations("s1")] == [c.id for c in repo.list_conversations("s1")]


def test_update_conversation_always_advances_updated_at(repo):
    conversation = repo.create_conversation("s1", "Chat")

    updated = repo.update_conversation("s1", conversation.id, {})
    assert updated.updated_at >= conversation.updated_at
    assert updated.title == "Chat"

    renamed = repo.update_conversation("s1", conversation.id, ConversationUpdate(title="Renamed").changes())
    assert renamed.title == "Renamed"
    assert renamed.updated_at >= updated.updated_at
    assert renamed.created_at == conversation.created_at


def test_update_missing_conversation_returns_none(repo):
    assert repo.update_conversation("s1", "nope", {"title": "x"}) is None


def test_delete_conversation_cascades_to_messages(repo):
    conversation, messages = _conversation_with_messages(repo, count=3)
    other, other_messages = _conversation_with_messages(repo, count=1)

    assert repo.delete_conversation("s1", conversation.id) is True

    assert repo.get_conversation("s1", conversation.id) is None
    assert repo.list_messages("s1", conversation.id) == []
    for message in messages:
        assert repo.get_message("s1", message.id) is None
    assert [m.id for m in repo.list_messages("s1", other.id)] == [other_messages[0].id]


def test_delete_missing_conversation_is_false(repo):
    assert repo.delete_conversation("s1", "nope") is False


def test_new_message_is_listed_last(repo):
    conversation, _ = _conversation_with_messages(repo, count=3)
    newest = repo.create_message("s1", conversation.id, "user", "latest")

    listed = repo.list_messages("s1", conversation.id)
    assert listed[-1].id == newest.id
    assert [m.content for m in listed] == ["m0", "m1", "m2", "latest"]


def test_list_messages_for_unknown_conversation_is_empty(repo):
    assert repo.list_messages("s1", "nope") == []


def test_update_message_merges_and_refreshes(repo):
    _, messages = _conversation_with_messages(repo, count=1)
    message = messages[0]
    assert message.updated_at is None

    updated = repo.update_message("s1", message.id, MessageUpdate(is_bookmarked=True).changes())

    assert updated.is_bookmarked is True
    assert updated.content == message.content
    assert updated.updated_at is not None
    assert repo.get_message("s1", message.id).is_bookmarked is True


def test_update_message_cannot_change_role_or_conversation(repo):
    conversation, messages = _conversation_with_messages(repo, count=1)

    updated = repo.update_message(
        "s1", messages[0].id, {"role": "assistant", "conversation_id": "other", "content": "edited"}
    )

    assert updated.role == "user"
    assert updated.conversation_id == conversation.id
    assert updated.content == "edited"


def test_delete_message(repo):
    _, messages = _conversation_with_messages(repo, count=2)
    assert repo.delete_message("s1", messages[0].id) is True
    assert repo.delete_message("s1", messages[0].id) is False
    assert repo.get_message("s1", messages[0].id) is None


def test_settings_partial_update(repo):
    before = repo.get_settings("s1")

    after = repo.update_settings("s1", SettingsUpdate(theme="light", sound_enabled=True).changes())

    assert after.theme == "light"
    assert after.sound_enabled is True
    assert after.font_size == "medium"
    assert after.id == before.id
    assert after.updated_at >= before.updated_at
    assert repo.get_settings("s2").theme == "dark-gray"


def test_count_conversations(repo):
    repo.create_conversation("s1", "a")
    repo.create_conversation("s1", "b")
    repo.create_conversation("s2", "c")
    assert repo.count_conversations("s1") == 2
    assert repo.count_conversations("s2") == 1
