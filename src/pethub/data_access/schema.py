from pethub.data_access.dynamodb import ENTITY_INDEX, OWNER_INDEX

def _index(name: str, partition: str, sort: str) -> dict:
    return {
        "IndexName": name,
        "KeySchema": [
            {"AttributeName": partition, "KeyType": "HASH"},
            {"AttributeName": sort, "KeyType": "RANGE"},
        ],
        "Projection": {"ProjectionType": "ALL"},
    }

def create_table(dynamo_resource, table_name: str):
    """Creates the single table with its two indexes (local runs and tests)."""
    table = dynamo_resource.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": name, "AttributeType": "S"}
            for name in ("PK", "SK", "GSI1PK", "GSI1SK", "GSI2PK", "GSI2SK")
        ],
        GlobalSecondaryIndexes=[
            _index(ENTITY_INDEX, "GSI1PK", "GSI1SK"),
            _index(OWNER_INDEX, "GSI2PK", "GSI2SK"),
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    table.wait_until_exists()
    return table
