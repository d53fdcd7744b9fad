from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "resident" (
    "id" CHAR(36) NOT NULL PRIMARY KEY,
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "full_name" VARCHAR(255) NOT NULL,
    "phone" VARCHAR(50),
    "line_user_id" VARCHAR(100),
    "status" VARCHAR(10) NOT NULL DEFAULT 'Active' /* ACTIVE: Active\nCHECKED_OUT: CheckedOut */,
    "check_in_date" DATE NOT NULL,
    "check_out_date" DATE,
    "deposit_status" VARCHAR(17) NOT NULL DEFAULT 'Held' /* HELD: Held\nRETURNED: Returned\nPARTIALLY_RETURNED: PartiallyReturned\nFORFEITED: Forfeited */,
    "deposit_returned_date" DATE,
    "deposit_returned_amount" VARCHAR(40),
    "deposit_forfeit_reason" VARCHAR(255),
    "room_id" CHAR(36) REFERENCES "room" ("id") ON DELETE SET NULL
) /* A tenant living in a room; kept after checkout for history. */;
        ALTER TABLE "billingentry" ADD "resident_id" CHAR(36) REFERENCES "resident" ("id") ON DELETE SET NULL;"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        ALTER TABLE "billingentry" DROP COLUMN "resident_id";
        DROP TABLE IF EXISTS "resident";"""
