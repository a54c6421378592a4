from typing import Tuple, Dict, Optional

from boto3.dynamodb.conditions import Key, Attr
from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ROLES, DEFAULT_PHOTO_URL
from chalicelib.constants.status_codes import http200
from chalicelib.utils import auth as utils_auth, app as utils_app, data as utils_data, db as utils_db, exceptions
from chalicelib.utils.logger import logger


class User(EntityBase):
    pk = keys_structure.users_pk
    sk = keys_structure.users_sk

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'email': lambda x: isinstance(x, str) and '@' in x,
        'role': lambda x: x in ROLES,
        'date_created': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'date_updated': lambda x: isinstance(x, str)
    }

    # fields a user can change through the profile page
    optional_fields_validation = {
        'name': lambda x: isinstance(x, str),
        'display_name': lambda x: isinstance(x, str),
        'phone': lambda x: isinstance(x, str),
        'address': lambda x: isinstance(x, str)
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_)

        self.email: str = kwargs.get('email')
        self.name: str = kwargs.get('name')
        self.display_name: str = kwargs.get('display_name')
        self.role: str = kwargs.get('role')
        self.phone: str = kwargs.get('phone')
        self.address: str = kwargs.get('address')
        self.photo_url: str = kwargs.get('photo_url')
        self.email_verified: bool = kwargs.get('email_verified', False)
        self.date_created: str = kwargs.get('date_created')
        self.date_updated: str = kwargs.get('date_updated')
        self.record_type = 'user'

    @classmethod
    def init_by_id(cls, id_):
        c = cls(id_)
        c.__init__(**c._get_db_item())
        return c

    @classmethod
    def init_by_id_or_none(cls, id_) -> Optional['User']:
        try:
            return cls.init_by_id(id_)
        except exceptions.RecordNotFound:
            logger.warning(f'init_by_id_or_none ::: user {id_} not found')
            return None

    @classmethod
    @utils_auth.authenticate_class
    def init_request_user(cls, request):
        logger.info("init_request_user ::: started")
        return cls.init_by_id(request.auth_result['user_id'])

    @classmethod
    @utils_auth.authenticate_class
    def init_request_update(cls, request):
        logger.info("init_request_update ::: started")
        request_body = utils_data.parse_raw_body(request)
        request_body.pop('id_', None)
        return cls(id_=request.auth_result['user_id'], **request_body)

    @classmethod
    def create(cls, id_: str, email: str, name: str, role: str, email_verified: bool = True, **kwargs) -> 'User':
        now = utils_data.now_iso()
        user = cls(
            id_=id_,
            email=email.lower(),
            name=name,
            display_name=kwargs.get('display_name') or name,
            role=role,
            phone=kwargs.get('phone', ''),
            address=kwargs.get('address', ''),
            photo_url=kwargs.get('photo_url'),
            email_verified=email_verified,
            date_created=now,
            date_updated=now
        )
        user._create_db_record(condition_expression=Attr('partkey').not_exists())
        return user

    @staticmethod
    def find_by_email(email: str) -> Optional[Dict]:
        records = utils_db.query_items_paged(
            Key('partkey').eq(keys_structure.users_pk),
            filter_expression=Attr('email').eq(email.lower())
        )
        return records[0] if records else None

    @utils_app.log_start_finish
    def endpoint_get_user(self) -> Response:
        return Response(status_code=http200, body=self._to_ui())

    @utils_app.log_start_finish
    def endpoint_update_user(self) -> Response:
        attributes = self._update_db_record(condition_expression=Attr('partkey').exists())
        self.__init__(**attributes)
        return Response(status_code=http200, body={'message': 'User was successfully updated', 'user': self._to_ui()})

    def set_photo_url(self, photo_url: str) -> None:
        pk, sk = self._get_pk_sk()
        self.photo_url = photo_url
        self.date_updated = utils_data.now_iso()
        utils_db.update_db_record(
            key={'partkey': pk, 'sortkey': sk},
            update_body={'photo_url': photo_url, 'date_updated': self.date_updated},
            allowed_attrs_to_update=['photo_url', 'date_updated'],
            allowed_attrs_to_delete=[]
        )
        logger.info(f'set_photo_url ::: user {self.id_} photo updated')

    def mark_email_verified(self) -> None:
        pk, sk = self._get_pk_sk()
        self.email_verified = True
        self.date_updated = utils_data.now_iso()
        utils_db.update_db_record(
            key={'partkey': pk, 'sortkey': sk},
            update_body={'email_verified': True, 'date_updated': self.date_updated},
            allowed_attrs_to_update=['email_verified', 'date_updated'],
            allowed_attrs_to_delete=[]
        )

    def to_participant(self) -> Dict:
        return {
            'id': self.id_,
            'name': self.name or self.display_name or 'Unknown User',
            'photo': self.photo_url or DEFAULT_PHOTO_URL,
            'role': self.role
        }

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(user_id=self.id_)

    def _to_dict(self):
        return {
            'id_': self.id_,
            'email': self.email,
            'name': self.name,
            'display_name': self.display_name,
            'role': self.role,
            'phone': self.phone,
            'address': self.address,
            'photo_url': self.photo_url,
            'email_verified': self.email_verified,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }
