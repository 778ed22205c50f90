from dotenv import load_dotenv

load_dotenv()

from server import server  # noqa: E402

# Served with: uvicorn main:server_app
server_app = server.handler
