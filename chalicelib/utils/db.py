import functools
import os
from typing import Dict, List, Tuple

import boto3 as boto3

from chalicelib.constants import substitute_keys
from chalicelib.utils import data
from chalicelib.utils import exceptions
from chalicelib.utils.boto_clients import aws_config_ddb
from chalicelib.utils.logger import logger, log_exception

need_return_capacity = ('put_item', 'get_item', 'update_item', 'delete_item')

_TABLES = {}


def db_call_logger(func):
    """
        should be used for any atomic
        get/put/update/delete item in the code
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f'{func.__name__}:: args={args}, kwargs={kwargs}')
        if func.__name__ not in need_return_capacity:
            raise RuntimeError("This decorator only for DynamoDB methods")
        kwargs.update({'ReturnConsumedCapacity': 'TOTAL'})
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            log_exception(e, msg=f'Got exception while trying to {func.__name__}: ')
            raise
        logger.info(f'{func.__name__}:: SUCCESS, consumed={result.get("ConsumedCapacity")}')
        return result

    return wrapper


def get_table(table_name: str):
    if table_name not in _TABLES:
        if os.environ.get('ENDPOINT_URL'):
            table = boto3.resource('dynamodb', endpoint_url=os.environ.get('ENDPOINT_URL')).Table(table_name)
        else:
            table = boto3.resource('dynamodb', config=aws_config_ddb).Table(table_name)

        table.put_item = db_call_logger(table.put_item)
        table.get_item = db_call_logger(table.get_item)
        table.update_item = db_call_logger(table.update_item)
        table.delete_item = db_call_logger(table.delete_item)
        _TABLES[table_name] = table

    return _TABLES[table_name]


def get_gen_table():
    return get_table(os.environ.get('GEN_TABLE_NAME'))


def put_db_record(item: dict, condition_expression=None, table=get_gen_table):
    kwargs = {'Item': item}
    if condition_expression is not None:
        kwargs['ConditionExpression'] = condition_expression
    table().put_item(**kwargs)


def update_db_record(key: dict, update_body: dict, allowed_attrs_to_update: list,
                     allowed_attrs_to_delete: list, condition_expression=None, table=get_gen_table):
    data.substitute_keys(dict_to_process=update_body, base_keys=substitute_keys.to_db)
    set_expr, expr_attr_values, remove_expr, expr_attr_names = generate_update_expression(
        update_body=update_body,
        allowed_attrs_to_update=allowed_attrs_to_update,
        allowed_attrs_to_delete=allowed_attrs_to_delete
    )
    update_item_dict = {"Key": key, "ReturnValues": "ALL_NEW"}
    if condition_expression is not None:
        update_item_dict["ConditionExpression"] = condition_expression

    expressions = ' '.join(expr for expr in (set_expr, remove_expr) if expr)
    if not expressions:
        logger.warning(f'update_db_record ::: nothing to update for {key=}')
        return None

    update_item_dict.update({
        "UpdateExpression": expressions,
        "ExpressionAttributeNames": expr_attr_names
    })
    if expr_attr_values:
        update_item_dict["ExpressionAttributeValues"] = expr_attr_values

    return table().update_item(**update_item_dict).get('Attributes')


def generate_update_expression(update_body: dict, allowed_attrs_to_update: list, allowed_attrs_to_delete: list):
    """
    Generate expressions to update and delete attributes.
    if a key of update_body is empty - the attribute is deleted, else - attribute is updated.
    Attribute names always go through placeholders, several of ours (status, name, read) are reserved words.
    """
    expr_attr_values = {}
    expr_attr_names = {}
    set_parts = []
    remove_parts = []
    for field in allowed_attrs_to_update:
        if field not in update_body:
            continue
        field_value = update_body[field]
        if field_value in ['', [], {}, None] and field in allowed_attrs_to_delete:
            expr_attr_names[f'#{field}'] = field
            remove_parts.append(f'#{field}')
        elif field_value is not None:
            expr_attr_names[f'#{field}'] = field
            expr_attr_values[f':{field}'] = field_value
            set_parts.append(f'#{field}=:{field}')

    set_expr = f'SET {", ".join(set_parts)}' if set_parts else None
    remove_expr = f'REMOVE {", ".join(remove_parts)}' if remove_parts else None
    return set_expr, expr_attr_values, remove_expr, expr_attr_names


def increment_counters(key: dict, counters: Dict[str, int], table=get_gen_table):
    """
    Atomic ADD of each counter, the item is created when missing
    """
    expr_attr_names = {f'#{name}': name for name in counters}
    expr_attr_values = {f':{name}': value for name, value in counters.items()}
    add_expr = 'ADD ' + ', '.join(f'#{name} :{name}' for name in counters)
    return table().update_item(
        Key=key,
        UpdateExpression=add_expr,
        ExpressionAttributeNames=expr_attr_names,
        ExpressionAttributeValues=expr_attr_values,
        ReturnValues='ALL_NEW'
    ).get('Attributes')


def get_db_item(partkey, sortkey, table=get_gen_table):
    result = table().get_item(
        Key={
            'partkey': partkey,
            'sortkey': sortkey
        }
    )

    if 'Item' in result:
        return result['Item']
    else:
        logger.warning(f"get_db_item ::: record partkey={partkey} sortkey={sortkey} not found")
        raise exceptions.RecordNotFound(f'record partkey={partkey} sortkey={sortkey} not found')


def delete_db_record(key: dict, table=get_gen_table):
    table().delete_item(Key=key)


def query_items_paginated(
        key_condition_expression,
        filter_expression=None,
        projection_expression=None,
        table=get_gen_table,
        index_name=None,
        expr_attr_names=None,
        limit=None,
        start_key=None,
        scan_forward=True
) -> Tuple[List[Dict], Dict]:
    kwargs = {'KeyConditionExpression': key_condition_expression, 'ScanIndexForward': scan_forward}
    if filter_expression is not None:
        kwargs.update({'FilterExpression': filter_expression})

    if projection_expression:
        kwargs.update({'ProjectionExpression': projection_expression})

    if expr_attr_names:
        kwargs.update({'ExpressionAttributeNames': expr_attr_names})

    if limit:
        kwargs.update({'Limit': int(limit)})

    if index_name:
        kwargs.update({'IndexName': index_name})

    if start_key:
        kwargs.update({'ExclusiveStartKey': start_key})

    resp = table().query(**kwargs)
    return resp['Items'], resp.get('LastEvaluatedKey')


def query_items_paged(key_condition_expression, filter_expression=None, projection_expression=None,
                      table=get_gen_table, index_name=None, expr_attr_names=None, scan_forward=True) -> List[Dict]:
    """ This method shall be used whenever you think the query will
        return more than 1mb of data at once"""
    all_items = []
    last_evaluated_key = None

    while True:
        items, last_evaluated_key = query_items_paginated(
            key_condition_expression,
            filter_expression=filter_expression,
            projection_expression=projection_expression,
            table=table,
            index_name=index_name,
            expr_attr_names=expr_attr_names,
            start_key=last_evaluated_key,
            scan_forward=scan_forward
        )
        all_items.extend(items)
        if last_evaluated_key is None:
            break

    return all_items
