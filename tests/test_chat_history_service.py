import pytest

from models.chefs import get_chef
from services.chat_history_service import ChatHistoryService, title_from_message
from services.errors import NotFoundError, ValidationError


@pytest.fixture
def history(db):
    return ChatHistoryService(db)


class TestTitles:
    def test_short_message_used_as_is(self):
        assert title_from_message("  How do I make egusi?  ") == "How do I make egusi?"

    def test_long_message_truncated(self):
        assert title_from_message("a" * 60) == "a" * 50 + "..."


class TestChatSessions:
    def test_new_session_title_names_the_chef(self, history, make_profile):
        ada = make_profile("ada@example.com")
        chat = history.create_session(ada.ProfileId, get_chef("healthy-chef"))
        assert chat.title == "Chat with Chef Kemi"
        assert chat.chef.id == "healthy-chef"

    def test_first_user_message_becomes_title(self, history, make_profile):
        """Only the first user message renames the chat."""
        ada = make_profile("ada@example.com")
        chat = history.create_session(ada.ProfileId, get_chef("nigerian-chef"))

        history.add_message(chat.id, ada.ProfileId, "user", "Help me with pepper soup")
        history.add_message(chat.id, ada.ProfileId, "chef", "Of course!")
        history.add_message(chat.id, ada.ProfileId, "user", "Which fish works best?")

        loaded = history.load_session(chat.id, ada.ProfileId)
        assert loaded.title == "Help me with pepper soup"
        assert [m.sender for m in loaded.messages] == ["user", "chef", "user"]

    def test_chef_message_first_keeps_default_title(self, history, make_profile):
        ada = make_profile("ada@example.com")
        chat = history.create_session(ada.ProfileId, get_chef("nigerian-chef"))

        history.add_message(chat.id, ada.ProfileId, "chef", "Welcome!")
        history.add_message(chat.id, ada.ProfileId, "user", "Hello")

        assert history.load_session(chat.id, ada.ProfileId).title == "Chat with Chef Adunni"

    @pytest.mark.parametrize("sender,message_type,content", [
        ("robot", "text", "hi"),
        ("user", "video", "hi"),
        ("user", "text", "   "),
    ])
    def test_invalid_messages(self, history, make_profile, sender, message_type, content):
        ada = make_profile("ada@example.com")
        chat = history.create_session(ada.ProfileId, get_chef(None))
        with pytest.raises(ValidationError):
            history.add_message(chat.id, ada.ProfileId, sender, content, message_type=message_type)

    def test_sessions_are_private(self, history, make_profile):
        ada = make_profile("ada@example.com")
        bola = make_profile("bola@example.com")
        chat = history.create_session(ada.ProfileId, get_chef(None))

        with pytest.raises(NotFoundError):
            history.load_session(chat.id, bola.ProfileId)
        assert history.list_sessions(bola.ProfileId) == []

    def test_edit_and_delete_messages(self, history, make_profile):
        ada = make_profile("ada@example.com")
        chat = history.create_session(ada.ProfileId, get_chef(None))
        message = history.add_message(chat.id, ada.ProfileId, "user", "Helo")

        assert history.update_message(chat.id, ada.ProfileId, message.id, "Hello").content == "Hello"
        history.delete_message(chat.id, ada.ProfileId, message.id)

        assert history.load_session(chat.id, ada.ProfileId).messages == []
        with pytest.raises(NotFoundError):
            history.delete_message(chat.id, ada.ProfileId, message.id)

    def test_rename_switch_chef_and_delete(self, history, make_profile):
        ada = make_profile("ada@example.com")
        chat = history.create_session(ada.ProfileId, get_chef(None))

        assert history.rename_session(chat.id, ada.ProfileId, " Sunday lunch ").title == "Sunday lunch"
        with pytest.raises(ValidationError):
            history.rename_session(chat.id, ada.ProfileId, "")
        assert history.set_session_chef(chat.id, ada.ProfileId, get_chef("international-chef")).chef.name == "Chef Marcus"

        history.delete_session(chat.id, ada.ProfileId)
        assert history.list_sessions(ada.ProfileId) == []
