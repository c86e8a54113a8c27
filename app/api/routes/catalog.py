from fastapi import APIRouter

from app.schemas.records import Category, Region

router = APIRouter()


@router.get("/categories")
def categories():
    return {"data": [item.value for item in Category]}


@router.get("/regions")
def regions():
    return {"data": [item.value for item in Region]}
