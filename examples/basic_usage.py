#!/usr/bin/env python3
"""
Basic Usage Example

Demonstrates the simplest way to chart a dictated command.

Usage:
    python examples/basic_usage.py

Requirements:
    - GEMINI_API_KEY environment variable set
    - OPENAI_API_KEY set for the spoken read-back (optional)
    - pip install dental-voice-chart
"""

from dental_voice_chart import Pipeline, PipelineConfig


def main():
    config = PipelineConfig()
    config.storage.backend = "memory"
    pipeline = Pipeline(config)

    # Apply transcript text directly (skip audio capture/transcription)
    commands = [
        "301번 치주염 2단계",
        "104번 발치하고 전체 스케일링",
        "잇몸 색깔이 이상함 메모",
    ]

    for text in commands:
        result = pipeline.process_transcript(text, "demo-patient")
        print(f"{text!r} -> {result.status.value}: {result.user_message}")

    chart = pipeline.session("demo-patient").chart
    print()
    print(chart.to_json())


if __name__ == "__main__":
    main()
