from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "room" (
    "id" CHAR(36) NOT NULL PRIMARY KEY,
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "number" VARCHAR(20) NOT NULL UNIQUE,
    "price" VARCHAR(40) NOT NULL,
    "status" VARCHAR(11) NOT NULL DEFAULT 'Available' /* AVAILABLE: Available\nOCCUPIED: Occupied\nMAINTENANCE: Maintenance */,
    "last_water_reading" INT NOT NULL DEFAULT 0 /* Water meter value carried to the next bill */,
    "last_electric_reading" INT NOT NULL DEFAULT 0 /* Electric meter value carried to the next bill */,
    "charge_common_area" INT NOT NULL DEFAULT 1,
    "water_rate" VARCHAR(40),
    "electric_rate" VARCHAR(40),
    "trash_fee" VARCHAR(40),
    "internet_fee" VARCHAR(40),
    "other_fees" VARCHAR(40)
) /* A rentable room with its own water and electric meters. */;
CREATE TABLE IF NOT EXISTS "billingentry" (
    "id" CHAR(36) NOT NULL PRIMARY KEY,
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "month" DATE NOT NULL,
    "rent" VARCHAR(40) NOT NULL,
    "water_meter_last" INT NOT NULL,
    "water_meter_current" INT NOT NULL,
    "water_rate" VARCHAR(40) NOT NULL,
    "electric_meter_last" INT NOT NULL,
    "electric_meter_current" INT NOT NULL,
    "electric_rate" VARCHAR(40) NOT NULL,
    "trash_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "internet_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "other_fees" VARCHAR(40) NOT NULL DEFAULT 0,
    "common_water_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "common_electric_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "common_internet_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "common_trash_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "total_amount" VARCHAR(40) NOT NULL,
    "payment_status" VARCHAR(8) NOT NULL DEFAULT 'Pending' /* PENDING: Pending\nREVIEW: Review\nPAID: Paid\nOVERDUE: Overdue\nLATE: Late\nREJECTED: Rejected */,
    "payment_date" TIMESTAMP,
    "slip_reference" VARCHAR(255),
    "reviewed_at" TIMESTAMP,
    "review_note" VARCHAR(255),
    "room_id" CHAR(36) NOT NULL REFERENCES "room" ("id") ON DELETE CASCADE,
    CONSTRAINT "uid_billingentr_room_id_3c8a1e" UNIQUE ("room_id", "month")
) /* A room's bill for one month. */;
CREATE TABLE IF NOT EXISTS "centralmeterrecord" (
    "id" CHAR(36) NOT NULL PRIMARY KEY,
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "month" DATE NOT NULL UNIQUE,
    "water_meter_last" INT NOT NULL,
    "water_meter_current" INT NOT NULL,
    "water_rate_from_utility" VARCHAR(40) NOT NULL,
    "electric_meter_last" INT NOT NULL,
    "electric_meter_current" INT NOT NULL,
    "electric_total_cost" VARCHAR(40) NOT NULL /* Amount paid to the provider; the unit rate is derived from it */,
    "maintenance_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "internet_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "trash_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "note" VARCHAR(255)
) /* Building-wide meter readings and the provider's charges for one month. */;
CREATE TABLE IF NOT EXISTS "systemconfig" (
    "id" CHAR(36) NOT NULL PRIMARY KEY,
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "dorm_name" VARCHAR(255) NOT NULL DEFAULT '',
    "water_rate" VARCHAR(40) NOT NULL,
    "electric_rate" VARCHAR(40) NOT NULL,
    "trash_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "internet_fee" VARCHAR(40) NOT NULL DEFAULT 0,
    "other_fees" VARCHAR(40) NOT NULL DEFAULT 0,
    "common_area_enabled" INT NOT NULL DEFAULT 0,
    "common_area_distribution" VARCHAR(12) NOT NULL DEFAULT 'equal' /* EQUAL: equal\nPROPORTIONAL: proportional */,
    "common_area_cap_type" VARCHAR(10) NOT NULL DEFAULT 'none' /* NONE: none\nPERCENTAGE: percentage\nFIXED: fixed */,
    "common_area_cap_percentage" VARCHAR(40) NOT NULL DEFAULT 0,
    "common_area_cap_fixed" VARCHAR(40) NOT NULL DEFAULT 0
) /* Process-wide defaults for rates, fees and the common-area policy. */;
CREATE TABLE IF NOT EXISTS "recurringexpense" (
    "id" CHAR(36) NOT NULL PRIMARY KEY,
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "title" VARCHAR(255) NOT NULL,
    "amount" VARCHAR(40) NOT NULL,
    "category" VARCHAR(50) NOT NULL,
    "day_of_month" INT NOT NULL,
    "is_active" INT NOT NULL DEFAULT 1,
    "note" VARCHAR(255)
) /* Template for an expense that repeats every month. */;
CREATE TABLE IF NOT EXISTS "expense" (
    "id" CHAR(36) NOT NULL PRIMARY KEY,
    "created_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "title" VARCHAR(255) NOT NULL,
    "amount" VARCHAR(40) NOT NULL,
    "category" VARCHAR(50) NOT NULL,
    "date" DATE NOT NULL,
    "note" VARCHAR(255),
    "recurring_id" CHAR(36) REFERENCES "recurringexpense" ("id") ON DELETE SET NULL
) /* An operating expense paid by the owner. */;
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSON NOT NULL
);"""


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        DROP TABLE IF EXISTS "expense";
        DROP TABLE IF EXISTS "recurringexpense";
        DROP TABLE IF EXISTS "systemconfig";
        DROP TABLE IF EXISTS "centralmeterrecord";
        DROP TABLE IF EXISTS "billingentry";
        DROP TABLE IF EXISTS "room";"""
