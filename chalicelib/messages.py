from collections import Counter
from typing import Tuple, List, Dict, Optional
from uuid import uuid4

from boto3.dynamodb.conditions import Key, Attr
from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ROLES, ROLE_CUSTOMER, ACTIVE_ORDER_STATUSES, ACCEPTED_ORDER_STATUSES
from chalicelib.constants.status_codes import http200, http201
from chalicelib.orders import Order, get_customer_orders, get_delivery_orders
from chalicelib.users import User
from chalicelib.utils import auth as utils_auth, app as utils_app, data as utils_data, db as utils_db, exceptions
from chalicelib.utils.logger import logger


class Message(EntityBase):
    pk = keys_structure.messages_pk
    sk = keys_structure.messages_sk

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'order_id': lambda x: isinstance(x, str),
        'sender_id': lambda x: isinstance(x, str),
        'sender_role': lambda x: x in ROLES,
        'recipient_id': lambda x: isinstance(x, str),
        'text': lambda x: isinstance(x, str) and len(x) > 0,
        'timestamp': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'read': lambda x: isinstance(x, bool)
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_)

        self.order_id: str = kwargs.get('order_id')
        self.sender_id: str = kwargs.get('sender_id')
        self.sender_role: str = kwargs.get('sender_role')
        self.recipient_id: str = kwargs.get('recipient_id')
        self.text: str = kwargs.get('text')
        self.read: bool = kwargs.get('read', False)
        self.timestamp: str = kwargs.get('timestamp') or utils_data.now_iso()
        self.record_type = 'message'

    @classmethod
    @utils_auth.authenticate_class
    def init_request_send(cls, request, order_id):
        logger.info("init_request_send ::: started")
        auth_result = request.auth_result
        order = get_party_order(order_id, auth_result['user_id'])
        recipient_id = order.get_other_party_id(auth_result['user_id'])
        if not recipient_id:
            raise exceptions.ConversationClosed(f'Order {order_id} has no chat participant yet')

        text = utils_data.parse_raw_body(request).get('text')
        if not isinstance(text, str) or not text.strip():
            raise exceptions.MandatoryFieldsAreNotFilled('Message text is empty')
        return cls(
            id_=str(uuid4()),
            order_id=order_id,
            sender_id=auth_result['user_id'],
            sender_role=auth_result['session_role'],
            recipient_id=recipient_id,
            text=text.strip(),
            read=False
        )

    @utils_app.log_start_finish
    def endpoint_send_message(self) -> Response:
        self._create_db_record()
        return Response(status_code=http201, body=self._to_ui())

    def mark_read(self) -> None:
        pk, sk = self._get_pk_sk()
        utils_db.update_db_record(
            key={'partkey': pk, 'sortkey': sk},
            update_body={'read': True},
            allowed_attrs_to_update=['read'],
            allowed_attrs_to_delete=[]
        )
        self.read = True

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(order_id=self.order_id, timestamp=self.timestamp, message_id=self.id_)

    def _to_dict(self):
        return {
            'id_': self.id_,
            'order_id': self.order_id,
            'sender_id': self.sender_id,
            'sender_role': self.sender_role,
            'recipient_id': self.recipient_id,
            'text': self.text,
            'read': self.read,
            'timestamp': self.timestamp
        }

    def _to_ui(self):
        item = EntityBase._to_ui(self)
        item['sender'] = {'id': item.pop('sender_id'), 'role': item.pop('sender_role')}
        return item


def get_party_order(order_id: str, user_id: str) -> Order:
    order = Order.init_by_id(order_id)
    if not order.is_party(user_id):
        raise exceptions.OrderNotFound('Requested order not found')
    return order


def get_conversation(order_id: str) -> List[Message]:
    db_records = utils_db.query_items_paged(
        key_condition_expression=Key('partkey').eq(keys_structure.messages_pk) &
        Key('sortkey').begins_with(f'{order_id}_')
    )
    return [Message(**record) for record in db_records]


def get_last_message(order_id: str) -> Optional[Message]:
    db_records, _ = utils_db.query_items_paginated(
        key_condition_expression=Key('partkey').eq(keys_structure.messages_pk) &
        Key('sortkey').begins_with(f'{order_id}_'),
        limit=1,
        scan_forward=False
    )
    return Message(**db_records[0]) if db_records else None


def get_unread_messages(recipient_id: str, order_id: Optional[str] = None) -> List[Message]:
    key_condition_expression = Key('partkey').eq(keys_structure.messages_pk)
    if order_id:
        key_condition_expression = key_condition_expression & Key('sortkey').begins_with(f'{order_id}_')
    db_records = utils_db.query_items_paged(
        key_condition_expression=key_condition_expression,
        filter_expression=Attr('recipient_id').eq(recipient_id) & Attr('read').eq(False)
    )
    return [Message(**record) for record in db_records]


def mark_conversation_read(messages: List[Message], recipient_id: str) -> int:
    unread = [message for message in messages if message.recipient_id == recipient_id and not message.read]
    for message in unread:
        message.mark_read()
    if unread:
        logger.info(f'mark_conversation_read ::: {len(unread)} messages marked as read for {recipient_id}')
    return len(unread)


@utils_app.log_start_finish
@utils_auth.authenticate
def endpoint_get_conversation(request, order_id) -> Response:
    user_id = request.auth_result['user_id']
    order = get_party_order(order_id, user_id)
    messages = get_conversation(order_id)
    marked_read = mark_conversation_read(messages, user_id)

    participant_id = order.get_other_party_id(user_id)
    participant = User.init_by_id_or_none(participant_id) if participant_id else None
    return Response(status_code=http200, body={
        'order_id': order_id,
        'order_status': order.status,
        'participant': participant.to_participant() if participant else None,
        'messages': [message.to_ui() for message in messages],
        'marked_read': marked_read
    })


@utils_app.log_start_finish
@utils_auth.authenticate
def endpoint_get_chat_previews(request) -> Response:
    user_id, session_role = request.auth_result['user_id'], request.auth_result['session_role']
    if session_role == ROLE_CUSTOMER:
        orders = [order for order in get_customer_orders(user_id, ACTIVE_ORDER_STATUSES) if order.delivery_person_id]
    else:
        orders = get_delivery_orders(user_id, ACCEPTED_ORDER_STATUSES)

    unread_by_order = Counter(message.order_id for message in get_unread_messages(user_id))
    previews = []
    for order in orders:
        participant = User.init_by_id_or_none(order.get_other_party_id(user_id))
        if participant is None:
            continue
        last_message = get_last_message(order.id_)
        previews.append({
            'order_id': order.id_,
            'participant': participant.to_participant(),
            'last_message': {'text': last_message.text, 'timestamp': last_message.timestamp}
            if last_message else None,
            'order_status': order.status,
            'unread_count': unread_by_order.get(order.id_, 0)
        })
    return Response(status_code=http200, body={'chats': previews})


@utils_app.log_start_finish
@utils_auth.authenticate
def endpoint_get_unread_count(request) -> Response:
    unread: Dict[str, int] = dict(Counter(
        message.order_id for message in get_unread_messages(request.auth_result['user_id'])))
    return Response(status_code=http200, body={'unread_count': sum(unread.values()), 'by_order': unread})
