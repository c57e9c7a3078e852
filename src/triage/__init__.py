"""Triage — turn Rule Events into three operator-facing bullet points."""

from src.triage.summarizer import TriageClient, TriageResult, build_prompt, template_summary

__all__ = ["TriageClient", "TriageResult", "build_prompt", "template_summary"]
