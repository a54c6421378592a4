from decimal import Decimal
from typing import Dict

from chalice import Response

from chalicelib.constants import keys_structure
from chalicelib.constants.constants import RATING_MIN, RATING_MAX
from chalicelib.constants.status_codes import http200, http201
from chalicelib.utils import auth as utils_auth, app as utils_app, data as utils_data, db as utils_db, exceptions
from chalicelib.utils.logger import logger

STARS = range(RATING_MIN, RATING_MAX + 1)


def validate_score(score) -> int:
    if isinstance(score, bool) or not isinstance(score, (int, Decimal)) or score != int(score) \
            or not RATING_MIN <= score <= RATING_MAX:
        raise exceptions.ValidationException(f'Rating must be an integer from {RATING_MIN} to {RATING_MAX}')
    return int(score)


def stats_key() -> Dict:
    return {'partkey': keys_structure.ratings_pk, 'sortkey': keys_structure.ratings_sk}


def stats_to_ui(record: Dict) -> Dict:
    total_ratings = int(record.get('total_ratings', 0))
    total_score = int(record.get('total_score', 0))
    average = (Decimal(total_score) / total_ratings).quantize(Decimal('0.01')) if total_ratings else Decimal(0)
    return {
        'total_ratings': total_ratings,
        'total_score': total_score,
        'average': average,
        'ratings': {str(star): int(record.get(f'stars_{star}', 0)) for star in STARS}
    }


def get_stats() -> Dict:
    try:
        return utils_db.get_db_item(keys_structure.ratings_pk, keys_structure.ratings_sk)
    except exceptions.RecordNotFound:
        return {}


@utils_app.log_start_finish
@utils_auth.authenticate
def endpoint_submit_rating(request) -> Response:
    user_id = request.auth_result['user_id']
    score = validate_score(utils_data.parse_raw_body(request).get('rating'))

    attributes = utils_db.increment_counters(
        key=stats_key(),
        counters={'total_ratings': 1, 'total_score': score, f'stars_{score}': 1}
    )
    utils_db.put_db_record({
        'partkey': keys_structure.user_ratings_pk,
        'sortkey': keys_structure.user_ratings_sk.format(user_id=user_id),
        'record_type': 'user_rating',
        'rating': score,
        'timestamp': utils_data.now_iso()
    })
    logger.info(f'endpoint_submit_rating ::: {user_id=} rated {score}')
    return Response(status_code=http201, body=stats_to_ui(attributes))


@utils_app.log_start_finish
def endpoint_get_ratings() -> Response:
    return Response(status_code=http200, body=stats_to_ui(get_stats()))
