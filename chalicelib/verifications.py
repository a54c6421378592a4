import os
import secrets
from typing import Tuple
from urllib.parse import urlencode

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ROLES, VERIFICATION_CODE_LENGTH, VERIFICATION_EMAIL_SUBJECT
from chalicelib.utils import app as utils_app, data as utils_data, db as utils_db, exceptions
from chalicelib.utils.email_templates import get_verification_link_message, get_verification_link_html
from chalicelib.utils.logger import logger
from chalicelib.utils.notifications import send_email_ses


def generate_code(length: int = VERIFICATION_CODE_LENGTH) -> str:
    return ''.join(secrets.choice('0123456789') for _ in range(length))


def get_verification_link(email: str, code: str) -> str:
    return f"{os.environ.get('APP_URL', '').rstrip('/')}/complete-signup?{urlencode({'email': email, 'code': code})}"


class VerificationCode(EntityBase):
    pk = keys_structure.verification_codes_pk
    sk = keys_structure.verification_codes_sk

    required_immutable_fields_validation = {
        'email': lambda x: isinstance(x, str) and '@' in x,
        'code': lambda x: isinstance(x, str) and len(x) == VERIFICATION_CODE_LENGTH,
        'role': lambda x: x in ROLES,
        'date_created': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'email_sent': lambda x: isinstance(x, bool)
    }

    optional_fields_validation = {
        'name': lambda x: isinstance(x, str),
        'processed_at': lambda x: isinstance(x, str)
    }

    def __init__(self, email, **kwargs):
        EntityBase.__init__(self, kwargs.get('id_') or email)

        self.email: str = email
        self.code: str = kwargs.get('code')
        self.name: str = kwargs.get('name')
        self.role: str = kwargs.get('role')
        self.email_sent: bool = kwargs.get('email_sent', False)
        self.processed_at: str = kwargs.get('processed_at')
        self.date_created: str = kwargs.get('date_created') or utils_data.now_iso()
        self.record_type = 'verification_code'

    @classmethod
    def init_by_email(cls, email: str) -> 'VerificationCode':
        c = cls(email.lower())
        c.__init__(**c._get_db_item())
        return c

    @classmethod
    def create(cls, email: str, name: str, role: str) -> 'VerificationCode':
        """
        Overwrites a previous code for the same email, the stream trigger sends the link
        """
        verification = cls(email.lower(), code=generate_code(), name=name, role=role)
        verification._create_db_record()
        return verification

    def check_code(self, code: str) -> None:
        if not isinstance(code, str) or not secrets.compare_digest(code, self.code or ''):
            raise exceptions.WrongVerificationCode(f'Verification code for {self.email} does not match')

    def mark_processed(self) -> bool:
        self.email_sent = True
        self.processed_at = utils_data.now_iso()
        try:
            self._update_db_record(condition_expression=Attr('partkey').exists())
        except ClientError as error:
            if error.response.get('Error', {}).get('Code') != 'ConditionalCheckFailedException':
                raise
            logger.info(f'mark_processed ::: verification code for {self.email} was already used')
            return False
        return True

    def delete(self) -> None:
        pk, sk = self._get_pk_sk()
        utils_db.delete_db_record({'partkey': pk, 'sortkey': sk})
        logger.info(f'delete ::: verification code for {self.email} removed')

    def send_verification_email(self) -> str:
        link = get_verification_link(self.email, self.code)
        return send_email_ses(
            emails_to=[self.email],
            email_from=os.environ.get('EMAIL_FROM'),
            subject=VERIFICATION_EMAIL_SUBJECT,
            message=get_verification_link_message(self.name, link),
            html_message=get_verification_link_html(self.name, link)
        )

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(email=self.email)

    def _update_fields_whitelist(self):
        return ['email_sent', 'processed_at']

    def _to_dict(self):
        return {
            'email': self.email,
            'code': self.code,
            'name': self.name,
            'role': self.role,
            'email_sent': self.email_sent,
            'processed_at': self.processed_at,
            'date_created': self.date_created
        }


@utils_app.log_start_finish
def db_trigger_verification_code_record(record_old: dict, record_new: dict, event_id: str, event_name: str):
    if event_name.lower() != 'insert' and not (event_name.lower() == 'modify' and
                                               record_old.get('code') != record_new.get('code')):
        return
    verification = VerificationCode(**record_new)
    message_id = verification.send_verification_email()
    verification.mark_processed()
    logger.info(f'db_trigger_verification_code_record ::: link sent to {verification.email}, {message_id=}, '
                f'{event_id=}')
