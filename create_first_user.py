import logging

from sqlalchemy.exc import SQLAlchemyError

from intothewild.config import FIRST_ADMIN_EMAIL, FIRST_ADMIN_PASSWORD
from intothewild.database import SessionLocal
from intothewild.auth import get_password_hash
from intothewild.models.user import User

# Imported so SQLAlchemy knows every mapped class before the first query
from intothewild.models import trek, registration, id_proof, tent, notification

logger = logging.getLogger(__name__)

def create_first_user():
    db = SessionLocal()

    try:
        user = db.query(User).filter(User.username == "admin").first()

        if not user:
            logger.info("Creating the first administrator account...")
            db_user = User(
                username="admin",
                email=FIRST_ADMIN_EMAIL,
                full_name="Into The Wild Admin",
                hashed_password=get_password_hash(FIRST_ADMIN_PASSWORD),
                role="admin"
            )
            db.add(db_user)
            db.commit()
            logger.info(f"Administrator 'admin' created ({FIRST_ADMIN_EMAIL})")
        else:
            logger.info("Administrator 'admin' already exists.")

    except SQLAlchemyError as e:
        logger.error(f"Could not create the administrator account: {e}")
        db.rollback()
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_first_user()
