import os
from io import BytesIO
from typing import Tuple

from chalice import Response
from PIL import Image, UnidentifiedImageError
from requests_toolbelt.multipart.decoder import MultipartDecoder

from chalicelib.constants.constants import PROFILE_PHOTOS_PREFIX
from chalicelib.constants.status_codes import http200
from chalicelib.users import User
from chalicelib.utils import auth as utils_auth, app as utils_app, exceptions
from chalicelib.utils.logger import logger
from chalicelib.utils.s3 import upload_file_to_s3

PHOTO_FIELD_NAME = 'fileContent'


def get_resize_width_height(image: Image.Image, max_width: int) -> Tuple[int, int]:
    width, height = image.size
    divider = max([width, height]) / max_width
    if divider <= 1:
        return width, height
    return int(width / divider), int(height / divider)


def compress_image(image_file_obj: BytesIO) -> bytes:
    try:
        image: Image.Image = Image.open(image_file_obj)
    except UnidentifiedImageError:
        raise exceptions.ValidationException('Uploaded file is not an image')
    image = image.convert('RGB')
    image = image.resize(size=get_resize_width_height(image, int(os.environ.get('MAX_IMG_WIDTH', 400))))

    buf = BytesIO()
    image.save(buf, format='JPEG', optimize=True, quality=85)
    return buf.getvalue()


def parse_multipart_request_data(current_request) -> bytes:
    content_type = current_request.headers.get('content-type', '')
    if not content_type.startswith('multipart/form-data'):
        raise exceptions.ValidationException('multipart/form-data content type is expected')
    decoder = MultipartDecoder(current_request.raw_body, content_type)
    for part in decoder.parts:
        disposition = part.headers.get(b'Content-Disposition', b'').decode('utf-8')
        if f'name="{PHOTO_FIELD_NAME}"' in disposition:
            return part.content
    raise exceptions.MandatoryFieldsAreNotFilled(f'{PHOTO_FIELD_NAME} is missing in the request')


@utils_app.log_start_finish
@utils_auth.authenticate
def endpoint_upload_profile_photo(current_request) -> Response:
    user_id = current_request.auth_result['user_id']
    file_content = parse_multipart_request_data(current_request)
    content = compress_image(BytesIO(file_content))

    photo_url = upload_file_to_s3(content, f'{PROFILE_PHOTOS_PREFIX}/{user_id}', 'image/jpeg')
    User.init_by_id(user_id).set_photo_url(photo_url)
    logger.info(f'endpoint_upload_profile_photo ::: {user_id=} {photo_url=}')
    return Response(status_code=http200, headers={"Content-Type": 'application/json'},
                    body={'message': 'Profile photo updated successfully', 'photo_url': photo_url})
