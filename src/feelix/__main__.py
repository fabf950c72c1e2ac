import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from feelix.app_config import load_json_config, parse_app_config, resolve_runtime_env
from feelix.bootstrap import bootstrap_runtime
from feelix.errors import FeelixError


async def main() -> None:
    load_dotenv()

    app = parse_app_config(load_json_config())
    env = resolve_runtime_env()

    try:
        runtime = await bootstrap_runtime(app, env)
    except (ValueError, FeelixError) as ex:
        logger.error(str(ex))
        sys.exit(1)

    companion = runtime.companion
    print("Feelix - your emotional processing companion (type 'exit' to quit, '/help' for commands)")
    if runtime.auth is not None and runtime.auth.user is not None:
        print(f"Signed in as: {runtime.auth.user.get('email', runtime.auth.user_id)}")
    else:
        print("Signed in as: guest (offline)")
    print(f"Storage: {app.store_backend}")
    print(f"Theme: {runtime.color_scheme.name}")
    if runtime.log_descriptions:
        print(f"Logging: {', '.join(runtime.log_descriptions)}")
    print()
    companion.greet()

    try:
        while True:
            try:
                user_input = await asyncio.to_thread(input, "you> ")
            except (EOFError, KeyboardInterrupt):
                break

            trimmed = user_input.strip()

            if trimmed in ("exit", "quit"):
                break

            if not trimmed:
                continue

            try:
                await companion.run(trimmed)
                print()
            except Exception as ex:
                logger.error(f"Unhandled error: {ex}")
    finally:
        await runtime.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
