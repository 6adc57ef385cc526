from mangum import Mangum
from main import app

# Lifespan is off on Lambda; the schema is managed by Alembic there
handler = Mangum(app, lifespan="off")

def lambda_handler(event, context):
    return handler(event, context)
