"""DynamoDB tablo oluşturma.

3 tablo: Locations, Bins, StructureChanges
"""
import os
import sys

import boto3
from botocore.exceptions import ClientError
from botocore.config import Config

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
import env_loader


REGION = os.environ.get("AWS_DEFAULT_REGION", "us-east-1")
BOTO_CONFIG = Config(retries={"max_attempts": 3})

LOCATIONS_TABLE = os.environ.get("LOCATIONS_TABLE", "Locations")
BINS_TABLE = os.environ.get("BINS_TABLE", "Bins")
STRUCTURE_CHANGES_TABLE = os.environ.get("STRUCTURE_CHANGES_TABLE", "StructureChanges")

TABLE_DEFINITIONS = [
    {
        "TableName": LOCATIONS_TABLE,
        "KeySchema": [
            {"AttributeName": "location_id", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "location_id", "AttributeType": "S"},
            {"AttributeName": "parent_id", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": "ParentIndex",
                "KeySchema": [
                    {"AttributeName": "parent_id", "KeyType": "HASH"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": BINS_TABLE,
        "KeySchema": [
            {"AttributeName": "zone_id", "KeyType": "HASH"},
            {"AttributeName": "address", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "zone_id", "AttributeType": "S"},
            {"AttributeName": "address", "AttributeType": "S"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
    {
        "TableName": STRUCTURE_CHANGES_TABLE,
        "KeySchema": [
            {"AttributeName": "change_id", "KeyType": "HASH"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "change_id", "AttributeType": "S"},
            {"AttributeName": "zone_id", "AttributeType": "S"},
            {"AttributeName": "timestamp", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": "ZoneTimeIndex",
                "KeySchema": [
                    {"AttributeName": "zone_id", "KeyType": "HASH"},
                    {"AttributeName": "timestamp", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        "BillingMode": "PAY_PER_REQUEST",
    },
]


def create_tables(region: str = REGION, client=None):
    """Tüm DynamoDB tablolarını oluşturur (mevcut olanları atlar)."""
    dynamodb = client or boto3.client("dynamodb", region_name=region, config=BOTO_CONFIG)

    created = []
    for table_def in TABLE_DEFINITIONS:
        table_name = table_def["TableName"]
        try:
            dynamodb.describe_table(TableName=table_name)
            print(f"  ⏭️  {table_name} zaten mevcut, atlanıyor")
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                print(f"  🔨 {table_name} oluşturuluyor...")
                dynamodb.create_table(**table_def)
                # Tablonun aktif olmasını bekle
                waiter = dynamodb.get_waiter("table_exists")
                waiter.wait(TableName=table_name)
                print(f"  ✓  {table_name} oluşturuldu")
                created.append(table_name)
            else:
                raise
    return created


def delete_tables(region: str = REGION, client=None):
    """Tüm tabloları siler (dikkatli kullan)."""
    dynamodb = client or boto3.client("dynamodb", region_name=region, config=BOTO_CONFIG)
    for table_def in TABLE_DEFINITIONS:
        table_name = table_def["TableName"]
        try:
            dynamodb.delete_table(TableName=table_name)
            print(f"  🗑️  {table_name} silindi")
        except ClientError:
            print(f"  ⏭️  {table_name} bulunamadı, atlanıyor")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "--delete":
        print("🗑️  Tablolar siliniyor...")
        delete_tables()
    else:
        print("🏗️  DynamoDB tabloları oluşturuluyor...\n")
        create_tables()
