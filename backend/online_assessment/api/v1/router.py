from fastapi import APIRouter

from online_assessment.api.v1.endpoints import attempts, auth, health, learners, questions, tests


api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(questions.router)
api_router.include_router(tests.router)
api_router.include_router(learners.router)
api_router.include_router(attempts.router)
