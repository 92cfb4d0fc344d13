import pytest
from sqlalchemy.exc import IntegrityError

from models.repositories import ConversationRepository
from services.errors import AuthorizationError, NotFoundError, ValidationError
from services.messaging_service import MESSAGING_OK, MessagingService
from services.notification_service import NotificationService


@pytest.fixture
def pair(make_profile):
    ada = make_profile("ada@example.com", full_name="Ada Obi")
    bola = make_profile("bola@example.com", full_name="Bola Ade")
    return ada, bola


class TestConversations:
    def test_get_or_create_is_idempotent(self, db, pair):
        """Either side asking for the pair's conversation gets the same one."""
        ada, bola = pair
        service = MessagingService(db)

        first = service.get_or_create_conversation(ada.ProfileId, bola.ProfileId)
        again = service.get_or_create_conversation(ada.ProfileId, bola.ProfileId)
        reverse = service.get_or_create_conversation(bola.ProfileId, ada.ProfileId)

        assert first.id == again.id == reverse.id
        assert {p.id for p in first.participants} == {ada.ProfileId, bola.ProfileId}
        assert [p.id for p in first.other_participants(ada.ProfileId)] == [bola.ProfileId]

    def test_pair_is_unique_in_the_database(self, db, pair):
        ada, bola = pair
        repo = ConversationRepository(db)
        repo.create_direct(ada.ProfileId, bola.ProfileId)

        with pytest.raises(IntegrityError):
            repo.create_direct(bola.ProfileId, ada.ProfileId)

    def test_concurrent_create_reuses_the_winner(self, db, pair, monkeypatch):
        """A request that misses the lookup and then hits the unique key gets the existing conversation."""
        ada, bola = pair
        service = MessagingService(db)
        existing = ConversationRepository(db).create_direct(bola.ProfileId, ada.ProfileId)
        real_find = service.repo.find_direct
        calls = []

        def find_direct(user_id, other_user_id):
            calls.append((user_id, other_user_id))
            return None if len(calls) == 1 else real_find(user_id, other_user_id)

        monkeypatch.setattr(service.repo, "find_direct", find_direct)

        conversation = service.get_or_create_conversation(ada.ProfileId, bola.ProfileId)

        assert conversation.id == existing.ConversationId
        assert len(service.list_conversations(ada.ProfileId)) == 1

    def test_cannot_message_yourself(self, db, pair):
        ada, _ = pair
        with pytest.raises(ValidationError, match="with yourself"):
            MessagingService(db).get_or_create_conversation(ada.ProfileId, ada.ProfileId)

    def test_unknown_user(self, db, pair):
        ada, _ = pair
        with pytest.raises(NotFoundError, match="User not found"):
            MessagingService(db).get_or_create_conversation(ada.ProfileId, "no-such-user")

    def test_list_conversations_shows_last_message(self, db, pair):
        ada, bola = pair
        service = MessagingService(db)
        conversation = service.get_or_create_conversation(ada.ProfileId, bola.ProfileId)
        service.send_message(conversation.id, ada.ProfileId, "First")
        service.send_message(conversation.id, ada.ProfileId, "Second")

        listed = service.list_conversations(bola.ProfileId)

        assert len(listed) == 1
        assert listed[0].last_message.content == "Second"
        assert listed[0].unread_count == 2
        assert service.list_conversations(ada.ProfileId)[0].unread_count == 0


class TestMessages:
    def test_send_and_read(self, db, pair):
        """Messages come back oldest first with their sender."""
        ada, bola = pair
        service = MessagingService(db)
        conversation = service.get_or_create_conversation(ada.ProfileId, bola.ProfileId)

        service.send_message(conversation.id, ada.ProfileId, "  Hi Bola!  ")
        service.send_message(conversation.id, bola.ProfileId, "Hey Ada")

        messages = service.get_messages(conversation.id, ada.ProfileId)
        assert [m.content for m in messages] == ["Hi Bola!", "Hey Ada"]
        assert messages[0].sender.full_name == "Ada Obi"

    def test_blank_content_rejected(self, db, pair):
        ada, bola = pair
        service = MessagingService(db)
        conversation = service.get_or_create_conversation(ada.ProfileId, bola.ProfileId)
        with pytest.raises(ValidationError, match="Missing required fields"):
            service.send_message(conversation.id, ada.ProfileId, "   ")

    def test_outsiders_cannot_post_or_read(self, db, pair, make_profile):
        ada, bola = pair
        eve = make_profile("eve@example.com", full_name="Eve")
        service = MessagingService(db)
        conversation = service.get_or_create_conversation(ada.ProfileId, bola.ProfileId)

        with pytest.raises(AuthorizationError):
            service.send_message(conversation.id, eve.ProfileId, "Let me in")
        with pytest.raises(AuthorizationError):
            service.get_messages(conversation.id, eve.ProfileId)

    def test_unknown_conversation(self, db, pair):
        ada, _ = pair
        with pytest.raises(NotFoundError, match="Conversation not found"):
            MessagingService(db).get_messages(999, ada.ProfileId)

    def test_recipient_is_notified(self, db, pair):
        """Each message notifies the other participant with a short preview."""
        ada, bola = pair
        service = MessagingService(db)
        conversation = service.get_or_create_conversation(ada.ProfileId, bola.ProfileId)

        service.send_message(conversation.id, ada.ProfileId, "x" * 100)

        notes = NotificationService(db).fetch(bola.ProfileId)
        assert len(notes) == 1
        assert notes[0].type == "message"
        assert notes[0].title == "New message from Ada Obi"
        assert notes[0].message == "x" * 80 + "..."
        assert notes[0].data == {"conversation_id": conversation.id}
        assert NotificationService(db).fetch(ada.ProfileId) == []

    def test_mark_conversation_read(self, db, pair):
        """Only messages from the other side are marked."""
        ada, bola = pair
        service = MessagingService(db)
        conversation = service.get_or_create_conversation(ada.ProfileId, bola.ProfileId)
        service.send_message(conversation.id, ada.ProfileId, "One")
        service.send_message(conversation.id, ada.ProfileId, "Two")

        assert service.mark_conversation_read(conversation.id, ada.ProfileId) == 0
        assert service.mark_conversation_read(conversation.id, bola.ProfileId) == 2
        assert service.get_conversation(conversation.id, bola.ProfileId).unread_count == 0


class TestStatus:
    def test_status_ok(self, db):
        assert MessagingService(db).check_messaging_status() == (True, MESSAGING_OK)
