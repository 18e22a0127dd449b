# Nhập các thư viện cần thiết
from motor.motor_asyncio import AsyncIOMotorClient # Thư viện bất đồng bộ cho MongoDB
from beanie import init_beanie # ODM (Object-Document Mapper) cho MongoDB
from typing import Type

from .. import configs
from .user import User
from .credential import Credential
from .post import Post
from .message import Message

# Danh sách các model Beanie sẽ được khởi tạo
DOCUMENT_MODELS: list[Type] = [User, Credential, Post, Message]

client = None  # client global, dùng 1 lần suốt vòng đời app


def get_database():
    """
    Trả về database MongoDB thật của ứng dụng.
    Đảm bảo chỉ tạo một client duy nhất.
    """
    global client

    if client is None:
        if not configs.MONGO_URI:
            raise ValueError("Không tìm thấy MONGO_URI trong các biến môi trường.")
        client = AsyncIOMotorClient(configs.MONGO_URI)

    return client.get_database(configs.DATABASE_NAME)


async def init_db(database=None):
    """
    Gắn các model Beanie vào database được truyền vào
    (hoặc database thật nếu không truyền).
    """
    if database is None:
        database = get_database()

    await init_beanie(database=database, document_models=DOCUMENT_MODELS)

    return database
