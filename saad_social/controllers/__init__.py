from .session import SessionController, VIEW_LOADING, VIEW_LOGIN, VIEW_SHELL
from .shell import AppShell, ChatThread, TABS
