"""
Seed demo loan applications (one per status) for local admin-console work.
Run: python -m scripts.seed_applications (from the project root).
"""
import asyncio
import logging
from datetime import date

from database import AsyncSessionLocal, init_db
from schemas.application import ApprovalRequest
from services.review import ReviewService
from services.store import ApplicationStore

logger = logging.getLogger(__name__)


APPLICATIONS_DATA = [
    {
        "full_name": "Maria Aparecida Souza",
        "cpf": "123.456.789-09",
        "email": "maria.souza@example.com",
        "loan_type": "personal",
    },
    {
        "full_name": "João Pedro Lima",
        "cpf": "987.654.321-00",
        "email": "joao.lima@example.com",
        "loan_type": "clt",
        "approve": {
            "approved_amount": 15000.50,
            "address": "Rua das Flores, 120 - São Paulo/SP",
            "age": 34,
            "birth_date": date(1990, 5, 17),
            "mother_name": "Ana Lima",
            "gender": "M",
            "cpf_status": "Regular",
            "cns_number": "898 0012 3456 7890",
        },
    },
    {
        "full_name": "Carla Mendes",
        "cpf": "111.222.333-44",
        "email": "carla.mendes@example.com",
        "loan_type": "fgts",
        "reject": True,
    },
]


async def seed():
    await init_db()
    async with AsyncSessionLocal() as session:
        store = ApplicationStore(session)
        review = ReviewService(session)
        for data in APPLICATIONS_DATA:
            app = await store.insert(
                full_name=data["full_name"],
                cpf=data["cpf"],
                email=data["email"],
                loan_type=data["loan_type"],
            )
            if "approve" in data:
                await review.approve(app.id, ApprovalRequest(**data["approve"]))
            elif data.get("reject"):
                await review.reject(app.id)
            logger.info("Seeded %s (%s): client_token=%s", app.id, data["full_name"], app.client_token)
    logger.info("Seeded %d applications.", len(APPLICATIONS_DATA))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    asyncio.run(seed())
