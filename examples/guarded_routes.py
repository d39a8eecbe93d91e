from __future__ import annotations

import asyncio

from genro_hashrouter import Router, wrap
from genro_hashrouter.testing import MemoryContext, MemoryElement


class Home:
    pass


class Book:
    pass


class Spinner:
    pass


class AdminPanel:
    pass


async def load_admin():
    # Stands in for a lazily imported module
    await asyncio.sleep(0.1)
    return AdminPanel


SESSION = {"role": "guest"}


def is_admin(detail):
    return SESSION["role"] == "admin"


async def main():
    context = MemoryContext("#/")
    router = Router(
        context,
        {
            "/": Home,
            "/books/:id": Book,
            "/admin": wrap(async_view=load_admin, conditions=[is_admin], loading_view=Spinner),
        },
        restore_scroll_state=True,
        on_conditions_failed=lambda detail: print(f"Rejected: {detail.location}"),
    ).plug("logging")
    router.state.subscribe(lambda state: print(f"View: {getattr(state.view, '__name__', None)}"))
    await router.settle()

    print("\n--- 1. Following a link ---")
    anchor = MemoryElement("a", href="/books/42")
    router.link(anchor)
    anchor.click()
    await router.settle()
    print(f"Params: {router.params.value}")

    print("\n--- 2. Guarded route as guest ---")
    await router.push("/admin")
    await router.settle()

    print("\n--- 3. Guarded route as admin ---")
    SESSION["role"] = "admin"
    await router.replace("/admin")
    await router.settle()

    print("\n--- 4. Back ---")
    await router.pop()
    await router.settle()
    router.destroy()


if __name__ == "__main__":
    asyncio.run(main())
