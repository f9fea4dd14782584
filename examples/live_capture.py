#!/usr/bin/env python3
"""
Live Audio Capture Example

Demonstrates press-to-record charting from the microphone.

Usage:
    python examples/live_capture.py PATIENT_ID [--charts-dir charts]

Requirements:
    - GOOGLE_API_KEY and GEMINI_API_KEY environment variables set
    - OPENAI_API_KEY set for the spoken read-back (optional)
    - Microphone connected
"""

import argparse

from dental_voice_chart import Pipeline, PipelineConfig
from dental_voice_chart.capture import AudioCapture
from dental_voice_chart.errors import MicrophoneError


def list_devices():
    """List available audio input devices."""
    devices = AudioCapture.list_devices()

    if not devices:
        print("No audio input devices found")
        return

    print("Available audio input devices:")
    print("-" * 50)
    for device in devices:
        print(f"  [{device['index']}] {device['name']}")
        print(f"      Channels: {device['channels']}, Sample Rate: {device['sample_rate']} Hz")
    print()


def main():
    parser = argparse.ArgumentParser(description="Live voice charting")
    parser.add_argument("patient_id", nargs="?", default="demo-patient")
    parser.add_argument("--charts-dir", default="charts", help="Chart directory")
    parser.add_argument("--device", type=int, help="Input device index")
    parser.add_argument("--list-devices", action="store_true",
                        help="List audio devices and exit")
    args = parser.parse_args()

    if args.list_devices:
        list_devices()
        return

    config = PipelineConfig()
    config.storage.directory = args.charts_dir
    config.capture.device = args.device
    pipeline = Pipeline(config)

    print("=" * 60)
    print(f"Voice charting for patient {args.patient_id}")
    print("=" * 60)
    print("Press Enter to start recording and Enter again to stop.")
    print("Press Ctrl+C to quit.")
    print("-" * 60)

    try:
        while True:
            input("\n[Enter] record ")
            try:
                pipeline.start_recording()
            except MicrophoneError as e:
                print(f"{e.user_message} ({e})")
                return

            input("Recording... [Enter] stop ")
            result = pipeline.finish_recording(args.patient_id)
            if result is None:
                continue

            print(f"Transcript: {result.transcript}")
            print(result.user_message)
            if result.raw_response is not None:
                print(f"Raw model response: {result.raw_response}")

    except KeyboardInterrupt:
        pipeline.capture.stop()
        print("\nStopped")


if __name__ == "__main__":
    main()
