from fastapi import APIRouter
from student_records.api.v1.endpoints import student

api_router = APIRouter()
api_router.include_router(student.router)
