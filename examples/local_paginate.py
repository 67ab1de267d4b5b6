from __future__ import annotations

import logging
import os
import uuid

import boto3

from dynaquery import Query, TableSchema


def _client():
    return boto3.client(
        "dynamodb",
        endpoint_url=os.environ.get("DYNAMODB_ENDPOINT", "http://localhost:8000"),
        region_name=os.environ.get("AWS_REGION", "us-east-1"),
        aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID", "dummy"),
        aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY", "dummy"),
    )


def main() -> None:
    logging.basicConfig(level=logging.DEBUG)
    client = _client()
    table_name = f"dynaquery_example_{uuid.uuid4().hex[:12]}"

    client.create_table(
        TableName=table_name,
        KeySchema=[{"AttributeName": "pk", "KeyType": "HASH"}, {"AttributeName": "sk", "KeyType": "RANGE"}],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    client.get_waiter("table_exists").wait(TableName=table_name)

    try:
        for i in range(25):
            client.put_item(
                TableName=table_name,
                Item={"pk": {"S": "A"}, "sk": {"S": f"{i:03d}"}, "status": {"S": "open" if i % 3 else "closed"}},
            )

        table = TableSchema(name=table_name, hash_key="pk", range_key="sk")
        query = Query(
            table,
            {
                "hash_value": "A",
                "range_begins_with": "0",
                "status": {"eq": "open"},
                "record_limit": 7,
                "batch_size": 4,
            },
            client=client,
        )
        print("request:", query.build_request())
        for page in query:
            print("page:", page.count, "scanned:", page.scanned_count, "cursor:", page.next_cursor)
    finally:
        client.delete_table(TableName=table_name)


if __name__ == "__main__":
    main()
