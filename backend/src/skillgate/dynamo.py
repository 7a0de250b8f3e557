"""
DynamoDB utility functions shared by the storage adapters.
"""
import json
import boto3
from decimal import Decimal
from typing import List, Dict, Any
from boto3.dynamodb.types import TypeDeserializer
from botocore.exceptions import ClientError
from .config import config

dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)
_deserializer = TypeDeserializer()


def get_table(table_name: str):
    """Return a boto3 Table resource for the given name."""
    return dynamodb.Table(table_name)


def is_conditional_check_failure(error: ClientError) -> bool:
    """True if a ClientError is a failed ConditionExpression."""
    return error.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException'


def query_all(table, **query_params) -> List[Dict[str, Any]]:
    """
    Query a table or index, following LastEvaluatedKey until exhausted.

    Args:
        table: boto3 Table resource
        **query_params: Arguments passed straight to Table.query

    Returns:
        All items matching the query
    """
    items = []
    params = dict(query_params)

    while True:
        response = table.query(**params)
        items.extend(response.get('Items', []))

        last_key = response.get('LastEvaluatedKey')
        if not last_key:
            return items
        params['ExclusiveStartKey'] = last_key


def to_decimal(value) -> Decimal:
    """Convert a number to Decimal the way DynamoDB expects it."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(round(value, 4)))
    return Decimal(str(value))


def to_dynamo(value: Any) -> Any:
    """Convert a JSON-like structure so boto3 accepts it (floats become Decimal)."""
    return json.loads(json.dumps(value, default=str), parse_float=Decimal)


def from_stream_image(image: Dict[str, Any]) -> Dict[str, Any]:
    """Deserialize a DynamoDB Streams NewImage/OldImage into plain values."""
    return {key: _deserializer.deserialize(value) for key, value in (image or {}).items()}
