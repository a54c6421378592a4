from decimal import Decimal, InvalidOperation
from typing import Tuple, Any, List, Dict, Optional
from uuid import uuid4

from boto3.dynamodb.conditions import Key, Attr
from botocore.exceptions import ClientError
from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ORDER_STATUSES, ORDER_STATUS_LABELS, ACTIVE_ORDER_STATUSES, \
    ACCEPTED_ORDER_STATUSES, PAYMENT_METHODS, ROLE_CUSTOMER, ROLE_DELIVERY, STATUS_ORDERED, STATUS_WAITING, \
    STATUS_DELIVERED
from chalicelib.constants.status_codes import http200, http201
from chalicelib.menu_items import get_menu_item
from chalicelib.users import User
from chalicelib.utils import auth as utils_auth, \
    data as utils_data, \
    db as utils_db, \
    app as utils_app, \
    exceptions
from chalicelib.utils.logger import logger


def get_order_progress(status: str) -> int:
    """
    Position of the status in the fixed lifecycle, -1 for an unknown status
    """
    return ORDER_STATUSES.index(status) if status in ORDER_STATUSES else -1


def get_next_status(status: str) -> Optional[str]:
    progress = get_order_progress(status)
    if progress < 0 or progress == len(ORDER_STATUSES) - 1:
        return None
    return ORDER_STATUSES[progress + 1]


def calculate_total(items: List[Dict]) -> Decimal:
    total = sum([Decimal(item['price']) * item['quantity'] for item in items if item.get('price') is not None],
                Decimal(0))
    return total.quantize(Decimal('1.00'))


def normalize_order_item(raw_item: Any) -> Dict:
    """
    Menu items are priced from the menu, free-form items keep the price they were sent with (if any)
    """
    if not isinstance(raw_item, dict):
        raise exceptions.ValidationException(f'Order item {raw_item} is not an object')
    quantity = raw_item.get('quantity', 1)
    if isinstance(quantity, bool) or not isinstance(quantity, (int, Decimal)) or quantity != int(quantity) \
            or quantity <= 0:
        raise exceptions.ValidationException(f'Quantity {quantity} of item {raw_item} is not valid')
    quantity = int(quantity)

    menu_item_id = raw_item.get('id')
    if menu_item_id is not None:
        menu_item = get_menu_item(menu_item_id)
        if menu_item is None:
            raise exceptions.ValidationException(f'Menu item {menu_item_id} does not exist')
        return {'id': menu_item.id_, 'name': menu_item.name, 'quantity': quantity, 'price': menu_item.price}

    name = raw_item.get('name')
    if not isinstance(name, str) or not name.strip():
        raise exceptions.ValidationException(f'Order item {raw_item} has neither a menu id nor a name')
    item = {'name': name.strip(), 'quantity': quantity}
    if raw_item.get('price') is not None:
        try:
            price = Decimal(raw_item['price'])
            if not price.is_finite():
                raise InvalidOperation(f'{price} is not a finite number')
            price = price.quantize(Decimal('1.00'))
        except (InvalidOperation, TypeError, ValueError):
            raise exceptions.ValidationException(f'Price of item {raw_item} is not valid')
        if price < 0:
            raise exceptions.ValidationException(f'Price of item {raw_item} is negative')
        item['price'] = price
    return item


class Order(EntityBase):
    pk = keys_structure.orders_pk
    sk = keys_structure.orders_sk

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'customer_id': lambda x: isinstance(x, str),
        'items': lambda x: isinstance(x, list) and len(x) > 0,
        'total': lambda x: isinstance(x, Decimal),
        'delivery_address': lambda x: isinstance(x, str) and len(x.strip()) > 0,
        'payment_method': lambda x: x in PAYMENT_METHODS,
        'payment_details': lambda x: isinstance(x, str) and len(x.strip()) > 0,
        'date_created': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'status': lambda x: x in ORDER_STATUSES,
        'date_updated': lambda x: isinstance(x, str)
    }

    optional_fields_validation = {
        'customer_name': lambda x: isinstance(x, str),
        'delivery_person_id': lambda x: isinstance(x, str),
        'notes': lambda x: isinstance(x, str)
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_)

        self.customer_id: str = kwargs.get('customer_id')
        self.customer_name: str = kwargs.get('customer_name')
        self.delivery_person_id: Optional[str] = kwargs.get('delivery_person_id')
        self.items: List[Dict] = kwargs.get('items', [])
        self.total: Optional[Decimal] = kwargs.get('total')
        self.delivery_address: str = kwargs.get('delivery_address')
        self.notes: Optional[str] = kwargs.get('notes')
        self.payment_method: str = kwargs.get('payment_method')
        self.payment_details: str = kwargs.get('payment_details')
        self.status: str = kwargs.get('status', STATUS_ORDERED)
        self.date_created: str = kwargs.get('date_created') or utils_data.now_iso()
        self.date_updated: str = kwargs.get('date_updated') or self.date_created
        self.record_type = 'order'

    @classmethod
    def init_by_id(cls, id_):
        c = cls(id_)
        try:
            c.__init__(**c._get_db_item())
        except exceptions.RecordNotFound:
            raise exceptions.OrderNotFound(f'Order {id_} not found')
        return c

    @classmethod
    @utils_auth.authenticate_class(role=ROLE_CUSTOMER)
    def init_request_place_order(cls, request):
        logger.info("init_request_place_order ::: started")
        auth_result = request.auth_result
        request_body = utils_data.parse_raw_body(request)

        raw_items = request_body.get('items') or []
        if not isinstance(raw_items, list) or len(raw_items) == 0:
            raise exceptions.EmptyCart('Please select at least one item')
        delivery_address = request_body.get('delivery_address')
        if not isinstance(delivery_address, str) or not delivery_address.strip():
            raise exceptions.WrongDeliveryAddress('Please enter a delivery address')
        if request_body.get('payment_method') not in PAYMENT_METHODS:
            raise exceptions.WrongPaymentDetails(f'Payment method must be one of {PAYMENT_METHODS}')
        payment_details = request_body.get('payment_details')
        if not isinstance(payment_details, str) or not payment_details.strip():
            raise exceptions.WrongPaymentDetails('Please enter payment details')

        items = [normalize_order_item(raw_item) for raw_item in raw_items]
        return cls(
            id_=str(uuid4()),
            customer_id=auth_result['user_id'],
            customer_name=auth_result.get('name'),
            delivery_person_id=None,
            items=items,
            total=calculate_total(items),
            delivery_address=delivery_address.strip(),
            notes=request_body.get('notes'),
            payment_method=request_body['payment_method'],
            payment_details=payment_details.strip(),
            status=STATUS_ORDERED
        )

    @classmethod
    @utils_auth.authenticate_class
    def init_request_get_order(cls, request, order_id):
        logger.info("init_request_get_order ::: started")
        order = cls.init_by_id(order_id)
        if not order.is_party(request.auth_result['user_id']):
            raise exceptions.OrderNotFound('Requested order not found')
        return order

    @classmethod
    @utils_auth.authenticate_class(role=ROLE_DELIVERY)
    def init_request_delivery_action(cls, request, order_id):
        logger.info("init_request_delivery_action ::: started")
        order = cls.init_by_id(order_id)
        order.request_data = {'auth_result': request.auth_result, 'body': utils_data.parse_raw_body(request)}
        return order

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.customer_id, self.delivery_person_id)

    def get_other_party_id(self, user_id: str) -> Optional[str]:
        if user_id == self.customer_id:
            return self.delivery_person_id
        if user_id == self.delivery_person_id:
            return self.customer_id
        return None

    @utils_app.log_start_finish
    def endpoint_place_order(self) -> Response:
        self._create_db_record(condition_expression=Attr('partkey').not_exists())
        return Response(status_code=http201, body=self._to_ui())

    @utils_app.log_start_finish
    def endpoint_get_by_id(self) -> Response:
        return Response(status_code=http200, body=self._to_ui())

    @utils_app.log_start_finish
    def endpoint_accept_order(self) -> Response:
        delivery_person_id = self.request_data['auth_result']['user_id']
        if self.status != STATUS_ORDERED or self.delivery_person_id:
            raise exceptions.OrderAlreadyClaimed(f'Order {self.id_} was already accepted')
        if self.customer_id == delivery_person_id:
            raise exceptions.OwnOrder(f'Order {self.id_} was placed by {delivery_person_id}')
        self.status = STATUS_WAITING
        self.delivery_person_id = delivery_person_id
        try:
            attributes = self._update_db_record(
                condition_expression=Attr('status').eq(STATUS_ORDERED) & Attr('delivery_person_id').not_exists()
            )
        except ClientError as error:
            if error.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException':
                raise exceptions.OrderAlreadyClaimed(f'Order {self.id_} was accepted by another delivery partner')
            raise
        self.__init__(**attributes)
        logger.info(f'endpoint_accept_order ::: order {self.id_} accepted by {delivery_person_id}')
        return Response(status_code=http200, body=self._to_ui())

    @utils_app.log_start_finish
    def endpoint_advance_status(self) -> Response:
        delivery_person_id = self.request_data['auth_result']['user_id']
        if self.delivery_person_id != delivery_person_id:
            raise exceptions.AccessDenied(f'Order {self.id_} is not assigned to {delivery_person_id}')
        current_status = self.status
        next_status = get_next_status(current_status)
        requested_status = self.request_data['body'].get('status', next_status)
        if next_status is None or current_status == STATUS_ORDERED or requested_status != next_status:
            raise exceptions.IllegalStatusTransition(
                f'Order {self.id_} cannot move from {current_status} to {requested_status}')
        self.status = next_status
        try:
            attributes = self._update_db_record(
                condition_expression=Attr('status').eq(current_status) & Attr('delivery_person_id').eq(
                    delivery_person_id)
            )
        except ClientError as error:
            if error.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException':
                raise exceptions.IllegalStatusTransition(f'Order {self.id_} was changed concurrently')
            raise
        self.__init__(**attributes)
        logger.info(f'endpoint_advance_status ::: order {self.id_} {current_status} -> {self.status}')
        return Response(status_code=http200, body=self._to_ui())

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(order_id=self.id_)

    def _to_dict(self):
        return {
            'id_': self.id_,
            'customer_id': self.customer_id,
            'customer_name': self.customer_name,
            'delivery_person_id': self.delivery_person_id,
            'items': self.items,
            'total': self.total,
            'delivery_address': self.delivery_address,
            'notes': self.notes,
            'payment_method': self.payment_method,
            'payment_details': self.payment_details,
            'status': self.status,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }

    def _to_ui(self):
        item = EntityBase._to_ui(self)
        item['progress'] = get_order_progress(self.status)
        item['status_label'] = ORDER_STATUS_LABELS.get(self.status, self.status)
        return item


def get_db_orders(filter_expression) -> List[Order]:
    db_records = utils_db.query_items_paged(
        key_condition_expression=Key('partkey').eq(keys_structure.orders_pk),
        filter_expression=filter_expression
    )
    orders = [Order(**record) for record in db_records]
    return sorted(orders, key=lambda order: order.date_created, reverse=True)


def get_customer_orders(customer_id: str, statuses: List[str]) -> List[Order]:
    return get_db_orders(Attr('customer_id').eq(customer_id) & Attr('status').is_in(statuses))


def get_delivery_orders(delivery_person_id: str, statuses: List[str]) -> List[Order]:
    return get_db_orders(Attr('delivery_person_id').eq(delivery_person_id) & Attr('status').is_in(statuses))


def get_available_orders() -> List[Order]:
    # claimed orders never keep the "ordered" status
    return get_db_orders(Attr('status').eq(STATUS_ORDERED))


def orders_response(orders: List[Order], **extra) -> Response:
    return Response(status_code=http200, body={'orders': [order.to_ui() for order in orders], **extra})


@utils_app.log_start_finish
@utils_auth.authenticate(role=ROLE_CUSTOMER)
def endpoint_get_active_orders(request) -> Response:
    user_id = request.auth_result['user_id']
    active_orders = get_customer_orders(user_id, ACTIVE_ORDER_STATUSES)
    delivered_count = len(get_customer_orders(user_id, [STATUS_DELIVERED]))
    return orders_response(active_orders, delivered_count=delivered_count)


@utils_app.log_start_finish
@utils_auth.authenticate(role=ROLE_CUSTOMER)
def endpoint_get_past_orders(request) -> Response:
    return orders_response(get_customer_orders(request.auth_result['user_id'], [STATUS_DELIVERED]))


@utils_app.log_start_finish
@utils_auth.authenticate(role=ROLE_DELIVERY)
def endpoint_get_available_orders(request) -> Response:
    orders = get_available_orders()
    customers: Dict[str, Optional[User]] = {}
    body = []
    for order in orders:
        if order.customer_id not in customers:
            customers[order.customer_id] = User.init_by_id_or_none(order.customer_id)
        customer = customers[order.customer_id]
        item = order.to_ui()
        item['customer'] = {
            'name': (customer.name if customer else None) or order.customer_name or 'Unknown Customer',
            'address': order.delivery_address or 'Address not available',
            'photo_url': customer.photo_url if customer else None
        }
        body.append(item)
    logger.info(f'endpoint_get_available_orders ::: returning {len(body)} orders')
    return Response(status_code=http200, body={'orders': body})


@utils_app.log_start_finish
@utils_auth.authenticate(role=ROLE_DELIVERY)
def endpoint_get_accepted_orders(request) -> Response:
    return orders_response(get_delivery_orders(request.auth_result['user_id'], ACCEPTED_ORDER_STATUSES))


@utils_app.log_start_finish
@utils_auth.authenticate(role=ROLE_DELIVERY)
def endpoint_get_delivery_history(request) -> Response:
    return orders_response(get_delivery_orders(request.auth_result['user_id'], [STATUS_DELIVERED]))


@utils_app.log_start_finish
def db_trigger_order_record(record_old: dict, record_new: dict, event_id: str, event_name: str):
    if event_name.lower() == 'insert':
        logger.info(f'db_trigger_order_record ::: new order id={record_new.get("id_")}, '
                    f'total={record_new.get("total")}, address={record_new.get("delivery_address")}, {event_id=}')
    elif event_name.lower() == 'modify' and record_old.get('status') != record_new.get('status'):
        logger.info(f'db_trigger_order_record ::: order id={record_new.get("id_")} status '
                    f'{record_old.get("status")} -> {record_new.get("status")}, {event_id=}')
