from .pdf_report import generate_training_report_pdf

__all__ = ["generate_training_report_pdf"]
