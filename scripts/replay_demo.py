"""Replay demo: records a short two-author session and plays it back.

Usage:
    python scripts/replay_demo.py          # normal speed
    python scripts/replay_demo.py 4        # 4x speed
"""

import asyncio
import sys

from pycrdt import Awareness

from collaboration.infrastructure.yjs_adapter import create_doc, get_text
from playback.application.engine import PlaybackEngine
from shared.infrastructure.logging import setup_logging
from versioning.application.recorder import EditRecorder

SPEED = float(sys.argv[1]) if len(sys.argv) > 1 else 1.0


def _append(value):
    def change(text):
        text.insert(len(str(text)), value)

    return change


def _drop_title(text):
    del text[0:8]


SESSION = [
    ("Alice", _append("Meeting notes")),
    ("Bob", _append("\n- ship the release")),
    ("Alice", _append("\n- write the changelog")),
    ("Bob", _drop_title),
    ("Bob", lambda text: text.insert(0, "Release ")),
]


async def record(doc, awareness) -> None:
    text = doc["content"]
    for author, change in SESSION:
        awareness.set_local_state({"user": {"name": author, "color": "#888888"}})
        change(text)
        await asyncio.sleep(0.3)


def show(event, doc) -> None:
    if event.kind == "playback":
        edit = event.edit
        print(f"[{event.current_edit_index}/{event.total_edits}] {edit.user_name} {edit.operation}")
        print(f"  {get_text(doc)!r}")
    elif event.kind == "stop":
        print(f"Stopped at {event.current_edit_index} (completed={event.completed})")


async def main() -> None:
    setup_logging("warning")

    doc = create_doc()
    awareness = Awareness(doc)
    recorder = EditRecorder(snapshot_interval=2)
    teardown = recorder.initialize(doc, awareness)

    print("Recording...")
    await record(doc, awareness)
    teardown()

    stats = recorder.get_statistics()
    print(f"\n{stats.total_edits} edits, {stats.total_snapshots} snapshots, by user {stats.edits_by_user}\n")

    engine = PlaybackEngine()
    engine.set_playback_speed(SPEED)
    engine.subscribe(show)

    print("Playing forward:")
    await engine.play_forward(recorder.get_edits(), recorder.get_snapshots())

    print("\nPlaying backward:")
    await engine.play_backward(recorder.get_edits(), recorder.get_snapshots())

    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
