from cubequality.services.llm.openai_client import generate_quality_report

__all__ = ["generate_quality_report"]
