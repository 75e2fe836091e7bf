from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Literal
import traceback

from app.api.routes.auth import verify_token
from app.api.middleware.database import setup_connection
from app.api.middleware.misc import *

router = APIRouter()

class WeightAdd(BaseModel):
    weight: float = weight_field
    unit: weight_unit_literal
    overwrite: bool = False

class HeightAdd(BaseModel):
    height: float = height_field
    unit: height_unit_literal
    overwrite: bool = False

@router.post("/weight/add")
async def users_weight_add(req: WeightAdd, credentials: dict = Depends(verify_token)):
    return await add_measurement("weight", credentials["user_id"], req.weight, req.unit, req.overwrite)

@router.post("/height/add")
async def users_height_add(req: HeightAdd, credentials: dict = Depends(verify_token)):
    return await add_measurement("height", credentials["user_id"], req.height, req.unit, req.overwrite)

@router.get("/weight/history")
async def users_weight_history(credentials: dict = Depends(verify_token)):
    return {
        "history": await measurement_history("weight", credentials["user_id"])
    }

@router.get("/height/history")
async def users_height_history(credentials: dict = Depends(verify_token)):
    return {
        "history": await measurement_history("height", credentials["user_id"])
    }

async def add_measurement(key: Literal["weight", "height"], user_id, value, unit, overwrite):
    data_map = measurement_tables_map[key]
    conn = tx = None
    try:
        conn = await setup_connection()
        tx = conn.transaction()
        await tx.start()

        today = today_utc()
        existing_id = await conn.fetchval(
            f"""
            select id
            from {data_map["table"]}
            where user_id = $1
            and recorded_on = $2
            """, user_id, today
        )

        if existing_id is not None and not overwrite:
            await tx.rollback()
            tx = None
            return {
                "status": "exists"
            }

        if existing_id is not None:
            await conn.execute(
                f"""
                update {data_map["table"]}
                set
                    {data_map["column"]} = $1,
                    {data_map["unit_column"]} = $2
                where id = $3
                """, value, unit, existing_id
            )
            status = "updated"
        else:
            await insert_measurement(conn, key, user_id, value, unit, today)
            status = "added"

        await conn.execute(
            f"""
            update users
            set
                {data_map["user_column"]} = $1,
                {data_map["user_unit_column"]} = $2
            where id = $3
            """, value, unit, user_id
        )

        await tx.commit()

        return {
            "status": status
        }

    except SafeError as e:
        if tx: await tx.rollback()
        raise e
    except Exception as e:
        print(str(e))
        if tx: await tx.rollback()
        traceback.print_exc()
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()

async def insert_measurement(conn, key, user_id, value, unit, recorded_on):
    data_map = measurement_tables_map[key]
    await conn.execute(
        f"""
        insert into {data_map["table"]}
        (user_id, {data_map["column"]}, {data_map["unit_column"]}, recorded_on)
        values
        ($1, $2, $3, $4)
        """, user_id, value, unit, recorded_on
    )

async def measurement_history(key, user_id):
    data_map = measurement_tables_map[key]
    conn = None
    try:
        conn = await setup_connection()

        rows = await conn.fetch(
            f"""
            select {data_map["column"]} as value, {data_map["unit_column"]} as unit, recorded_on
            from {data_map["table"]}
            where user_id = $1
            order by recorded_on desc
            """, user_id
        )

        return [
            {
                "value": row["value"],
                "unit": row["unit"],
                "date": date_to_str(row["recorded_on"]),
            }
            for row in rows
        ]

    except SafeError as e:
        raise e
    except Exception as e:
        print(str(e))
        raise Exception('uncaught error')
    finally:
        if conn: await conn.close()
