"""Prompt templates for receipt OCR."""

RECEIPT_EXTRACTION_PROMPT = """This image is a store receipt. Extract its contents as JSON in exactly this shape:
{
  "date": "purchase date as printed",
  "total": total amount (number),
  "items": [
    {
      "name": "item name exactly as printed on the receipt",
      "predict_name": "likely full product name, completing abbreviations or truncated names",
      "price": price (number),
      "quantity": quantity (number, 1 if not printed)
    }
  ]
}

Rules:
- Numbers must be digits only, with no currency symbols or separators.
- Fill predict_name only when the printed name is truncated or abbreviated. When the printed name is already clear, set predict_name to "".
- Do not include tax, subtotal, total, discount or payment lines as items.

Follow the JSON format strictly and return ONLY the JSON object, no other text."""
