"""Prompt templates for the vision and reasoning models"""

import json
from typing import Any, Dict, List

EXTRACTION_PROMPTS: Dict[str, str] = {
    "bank_statement": """
Analyze this bank statement image and extract the following financial information.
Respond ONLY with valid JSON in this exact format:
{
  "documentType": "bank_statement",
  "accountBalance": 0,
  "monthlyIncome": 0,
  "monthlyExpenses": 0,
  "accountAge": 0,
  "transactionCount": 0,
  "overdraftFees": 0,
  "averageBalance": 0,
  "riskFactors": [],
  "keyFindings": [],
  "confidence": 85
}

Extract numerical values where visible. For riskFactors and keyFindings, use short descriptive strings.
Do not include any text before or after the JSON object.
""",
    "financial": """
Analyze this financial statement and extract key business metrics.
Respond ONLY with valid JSON in this exact format:
{
  "documentType": "financial",
  "annualRevenue": 0,
  "netProfit": 0,
  "totalAssets": 0,
  "totalLiabilities": 0,
  "cashFlow": 0,
  "employeeCount": 0,
  "businessAge": 0,
  "debtToEquityRatio": 0,
  "profitMargin": 0,
  "riskFactors": [],
  "keyFindings": [],
  "confidence": 85
}

Extract exact figures where visible. Use 0 for missing values.
Do not include any text before or after the JSON object.
""",
    "legal": """
Analyze this legal document and extract compliance information.
Respond ONLY with valid JSON in this exact format:
{
  "documentType": "legal",
  "documentStatus": "Valid",
  "expirationDate": null,
  "legalRisk": "Low",
  "complianceScore": 85,
  "keyObligations": [],
  "riskFactors": [],
  "keyFindings": [],
  "confidence": 85
}

Use "Valid", "Invalid", "Pending", or "Expired" for documentStatus.
Use "Low", "Medium", or "High" for legalRisk.
Do not include any text before or after the JSON object.
""",
    "unknown": """
Analyze this document image and determine its type.
Respond ONLY with valid JSON in this exact format:
{
  "documentType": "unknown",
  "confidence": 60,
  "extractedData": {
    "amounts": [],
    "dates": [],
    "entities": []
  },
  "riskFactors": [],
  "keyFindings": [],
  "recommendation": ""
}

For documentType, use: "bank_statement", "financial", "legal", "invoice", "tax", or "other".
Do not include any text before or after the JSON object.
""",
}

CREDIT_RECOMMENDATION_PROMPT = """
As an expert credit analyst, analyze the following extracted financial data and provide a comprehensive credit recommendation.

EXTRACTED DATA FROM DOCUMENTS:
{extracted_data}

DOCUMENT SUMMARY:
- Total documents analyzed: {total_documents}
- Document types: {document_types}
- Average confidence: {average_confidence}%

Respond ONLY with valid JSON in this exact format:
{{
  "creditScore": 650,
  "rating": "Fair",
  "riskLevel": "Medium",
  "recommendation": "detailed recommendation text",
  "keyFactors": ["factor1", "factor2", "factor3"],
  "riskFactors": ["risk1", "risk2"],
  "improvementSuggestions": ["suggestion1", "suggestion2"],
  "maxCreditLimit": 15000,
  "interestRate": 12.5,
  "reasoning": "detailed explanation of scoring methodology",
  "confidence": 85,
  "analysisModel": "{model}"
}}

REQUIREMENTS:
- creditScore: number between 300-850
- rating: "Excellent", "Good", "Fair", "Poor", or "Very Poor"
- riskLevel: "Low", "Medium", or "High"
- All arrays should contain 2-5 relevant items
- All text fields should be professional and detailed
- Do not include any text before or after the JSON object
"""


def extraction_prompt(document_type: str) -> str:
    return EXTRACTION_PROMPTS.get(document_type, EXTRACTION_PROMPTS["unknown"])


def credit_recommendation_prompt(
    extracted_data: List[Dict[str, Any]],
    summary: Dict[str, Any],
    model: str,
) -> str:
    return CREDIT_RECOMMENDATION_PROMPT.format(
        extracted_data=json.dumps(extracted_data, indent=2, default=str),
        total_documents=summary["totalDocuments"],
        document_types=", ".join(summary["documentTypes"]),
        average_confidence=summary["averageConfidence"],
        model=model,
    )
