"""Example: drive the auth and attendance services without Flask.

Controllers are thin; the same login flow works over any SessionStorage.
"""

import importlib
import sys
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from config import get_settings_module

from attendance_portal.auth.state_machine import AuthStateMachine
from attendance_portal.auth.storage import InMemorySessionStorage
from attendance_portal.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    storage = InMemorySessionStorage()
    auth = AuthStateMachine(container.credential_store, storage)
    auth.restore()

    token, screen = container.login_screens.open()
    result = screen.submit(auth, "Admin", "Admin@123")
    if not result.success:
        print("login failed:", result.error)
        return
    container.login_screens.close(token)

    print("signed in as", result.user.display_name, "| stored:", storage.get("authUser"))
    data = container.attendance_service.build_dashboard(result.user)
    print(data.stats)

    auth.logout()
    print("state after logout:", auth.state.value)


if __name__ == "__main__":
    main()
