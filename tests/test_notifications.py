import aiosqlite

from db import crud
from db_case import ALICE_ID, BOB_ID, CAROL_ID, DAVE_ID, DbTestCase
from services import messaging, modifications, notifications
from utils.errors import NotFoundError, PermissionDeniedError, ValidationError


class NotificationsTestCase(DbTestCase):
    async def test_mark_read_and_counts(self):
        carol = await self.user(CAROL_ID)
        first = await crud.create_notification(CAROL_ID, "system", "Hello", "Welcome")
        await crud.create_notification(CAROL_ID, "order_update", "Order", "Moved", {"orderId": 1})
        self.assertEqual(await notifications.unread_count(carol), 2)

        read = await notifications.mark_read(carol, first.id)
        self.assertTrue(read.is_read)
        unread = await notifications.list_for_user(carol, unread_only=True)
        self.assertEqual([n.title for n in unread], ["Order"])

        self.assertEqual(await notifications.mark_all_read(carol), 1)
        self.assertEqual(await notifications.unread_count(carol), 0)
        self.assertEqual(len(await notifications.list_for_user(carol)), 2)

    async def test_other_users_notification_is_missing(self):
        note = await crud.create_notification(CAROL_ID, "system", "Private", "Only carol")
        with self.assertRaises(NotFoundError):
            await notifications.mark_read(await self.user(DAVE_ID), note.id)
        self.assertFalse((await crud.get_notification(note.id)).is_read)

    async def test_unknown_type_rejected_by_schema(self):
        with self.assertRaises(aiosqlite.IntegrityError):
            await crud.create_notification(CAROL_ID, "spam", "x", "y")


class MessagingTestCase(DbTestCase):
    async def test_send_notifies_receiver_with_preview(self):
        carol = await self.user(CAROL_ID)
        text = "Is the basket available in a larger size? " * 3
        message = await messaging.send(carol, ALICE_ID, text)

        (note,) = await crud.list_notifications(ALICE_ID)
        self.assertEqual(note.type, "message")
        self.assertEqual(note.title, "New message from Carol Buyer")
        self.assertEqual(note.message, text.strip()[:50] + "...")
        self.assertEqual(note.data, {"senderId": CAROL_ID, "messageId": message.id})

    async def test_send_validation(self):
        carol = await self.user(CAROL_ID)
        with self.assertRaises(ValidationError):
            await messaging.send(carol, ALICE_ID, "  ")
        with self.assertRaises(ValidationError):
            await messaging.send(carol, CAROL_ID, "note to self")
        with self.assertRaises(NotFoundError):
            await messaging.send(carol, 999, "hello?")

    async def test_conversation_marks_incoming_read(self):
        carol, alice = await self.user(CAROL_ID), await self.user(ALICE_ID)
        await messaging.send(carol, ALICE_ID, "hi")
        await messaging.send(alice, CAROL_ID, "hello")

        convo = await messaging.conversation(alice, CAROL_ID)
        self.assertEqual([m.content for m in convo], ["hi", "hello"])
        incoming = [m for m in convo if m.receiver_id == ALICE_ID]
        self.assertTrue(all(m.is_read for m in incoming))
        # carol has not opened it yet
        self.assertFalse([m for m in convo if m.receiver_id == CAROL_ID][0].is_read)

        self.assertEqual(len(await messaging.inbox(carol)), 2)


class ModificationRequestsTestCase(DbTestCase):
    async def test_request_and_response_round(self):
        carol, bob = await self.user(CAROL_ID), await self.user(BOB_ID)
        request = await modifications.create_request(carol, 4, "Could you size it to 7 please?")
        self.assertEqual(request.seller_id, BOB_ID)

        (seller_note,) = await crud.list_notifications(BOB_ID)
        self.assertEqual(seller_note.type, "modification_request")

        self.assertEqual([r.id for r in await modifications.list_for_seller(bob)], [request.id])
        self.assertEqual([r.id for r in await modifications.list_for_buyer(carol)], [request.id])

        answered = await modifications.respond(bob, request.id, "approved", "Will do")
        self.assertEqual(answered.status, "approved")
        (buyer_note,) = await crud.list_notifications(CAROL_ID)
        self.assertEqual(buyer_note.title, "Modification Request Updated")
        self.assertEqual(buyer_note.data, {"requestId": request.id, "status": "approved"})

    async def test_request_rules(self):
        carol, alice = await self.user(CAROL_ID), await self.user(ALICE_ID)
        with self.assertRaises(ValidationError):
            await modifications.create_request(carol, 4, "too short")
        with self.assertRaises(NotFoundError):
            await modifications.create_request(carol, 404, "long enough details")
        with self.assertRaises(PermissionDeniedError):
            await modifications.create_request(alice, 4, "sellers cannot ask")

    async def test_only_owning_seller_responds(self):
        dave = await self.user(DAVE_ID)
        request = await modifications.create_request(dave, 4, "Engrave initials D.S.")
        with self.assertRaises(PermissionDeniedError):
            await modifications.respond(await self.user(ALICE_ID), request.id, "denied")
        with self.assertRaises(ValidationError):
            await modifications.respond(await self.user(BOB_ID), request.id, "maybe")
        with self.assertRaises(NotFoundError):
            await modifications.respond(await self.user(BOB_ID), 999, "denied")
