import sys
import time
from pathlib import Path

from alarms.sounds import AlarmSoundPlayer
from alarms.vibration import PatternVibrator


def main():
    seconds = float(sys.argv[1]) if len(sys.argv) > 1 else 3.0
    player = AlarmSoundPlayer(Path("data/alarm.wav"))
    vibrator = PatternVibrator()
    print(f"Playing alert for {seconds:.0f}s...")
    vibrator.start_pattern()
    try:
        player.start_loop()
        time.sleep(seconds)
    finally:
        vibrator.cancel()
        player.release()
    print("Done.")


if __name__ == "__main__":
    main()
