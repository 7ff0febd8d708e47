#!/usr/bin/env python3
"""Interactive CLI to playtest the Mongle gauge engine against a pet server.

Usage:
    python play.py                    # production timing (2h decay)
    python play.py fast               # fast-iteration timing (2min decay)

Needs the pet API (API_BASE_URL) and Redis (REDIS_URL) from .env or the
environment. Gauges keep decaying in the background while you type.
"""

import asyncio
import sys

from mongle.config import settings
from mongle.core.engine import PetEngine, engine_session
from mongle.core.gauges import Gauge
from mongle.logging_config import configure_logging
from mongle.services.pet_client import ActionKind

# --- ANSI Colors ---
GAUGE_LABELS = {
    Gauge.AFFECTION: "\033[95m[애정]\033[0m",
    Gauge.AIR: "\033[96m[환기]\033[0m",
    Gauge.ENERGY: "\033[93m[에너지]\033[0m",
}

DIVIDER = "\033[90m" + "─" * 50 + "\033[0m"
RESET = "\033[0m"
DIM = "\033[90m"
BOLD = "\033[1m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"

BAR_WIDTH = 30

COMMANDS = {
    "v": "환기하기 (ventilate)",
    "p": "쓰다듬기 +20 (rub)",
    "a": "쓰다듬기 완료 (affection complete)",
    "s": "감정 조각 만들기 (spawn shard)",
    "c": "감정 조각 줍기 (collect shard)",
    "r": "서버에서 새로고침 (refresh)",
    "q": "종료",
}


def gauge_bar(value: float) -> str:
    filled = round(value / 100 * BAR_WIDTH)
    color = RED if value <= 30 else GREEN if value >= 100 else YELLOW
    return f"{color}{'█' * filled}{DIM}{'░' * (BAR_WIDTH - filled)}{RESET}"


def display_status(engine: PetEngine):
    """Print the three gauges, lock flags and the last known pet status."""
    print()
    print(DIVIDER)
    for gauge in Gauge:
        value = engine.value(gauge)
        lock = f" {GREEN}🔒{RESET}" if engine.is_locked(gauge) else ""
        print(f"  {GAUGE_LABELS[gauge]:<20} {gauge_bar(value)} {value:6.2f}{lock}")

    status = engine.status
    if status is not None:
        print(
            f"  {DIM}Lv.{status.level} {status.evolution_stage} "
            f"EXP {status.current_exp}/{status.required_exp} ☀ {status.sunlight}{RESET}"
        )
    if engine.shards:
        print(f"  {YELLOW}감정 조각: {', '.join(s.emotion for s in engine.shards)}{RESET}")
    if engine.is_action_pending:
        print(f"  {DIM}(요청 처리 중...){RESET}")


def display_commands():
    print()
    for key, text in COMMANDS.items():
        print(f"  \033[97m{key}\033[0m. {text}")
    print()


async def read_command() -> str:
    # input() blocks, so read on a thread and keep the timers ticking
    return (await asyncio.to_thread(input, "  명령: ")).strip().lower()


async def handle_command(engine: PetEngine, command: str) -> None:
    if command == "v":
        await engine.perform_action(ActionKind.VENTILATE)
    elif command == "p":
        engine.rub(20)
    elif command == "a":
        if not engine.is_locked(Gauge.AFFECTION):
            print(f"  {DIM}애정 게이지가 아직 가득 차지 않았어요.{RESET}")
            return
        await engine.perform_action(ActionKind.AFFECTION_COMPLETE)
    elif command == "s":
        shard = engine.spawn_shard("joy")
        if shard:
            print(f"  {YELLOW}감정 조각이 나타났어요! ({shard.x:.0f}%, {shard.y:.0f}%){RESET}")
    elif command == "c":
        if not engine.shards:
            print(f"  {DIM}주울 감정 조각이 없어요.{RESET}")
            return
        await engine.collect_shard(engine.shards[0].id)
    elif command == "r":
        await engine.refresh()
    else:
        print(f"  {RED}알 수 없는 명령: {command}{RESET}")


async def play(profile_name: str | None = None):
    async with engine_session(profile_name=profile_name) as engine:
        print()
        print(f"{BOLD}" + "=" * 50 + f"{RESET}")
        print(f"{BOLD}  몽글이 돌보기{RESET}")
        print(f"  {DIM}프로필: {engine.profile.name} / 사용자 {engine.user_id}{RESET}")
        print(f"{BOLD}" + "=" * 50 + f"{RESET}")

        while True:
            display_status(engine)
            display_commands()
            try:
                command = await read_command()
            except EOFError:
                break
            if not command:
                continue
            if command in ("q", "quit", "exit"):
                break
            await handle_command(engine, command)

    print(f"\n  {DIM}몽글이가 손을 흔들어요. 안녕!{RESET}\n")


def main():
    configure_logging(settings.LOG_LEVEL)
    profile_name = sys.argv[1] if len(sys.argv) > 1 else None
    asyncio.run(play(profile_name))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n\n{DIM}종료했어요.{RESET}")
    except FileNotFoundError as e:
        print(f"\033[91m{e}\033[0m")
