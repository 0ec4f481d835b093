from .service import ConversionReport, convert_document

__all__ = ["ConversionReport", "convert_document"]
