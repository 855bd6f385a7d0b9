"""
Case-management operation templates

Summaries, recommendations and checks generated for a case. Their replies are
recorded as interactions and can later be scored by the judge pipeline.
"""

from casejudge_core.domain.entities import PromptTemplate
from casejudge_core.prompts.schemas import (
    ApplicationAnalysisReply,
    CompletenessValidationReply,
    FinalSummaryReply,
    MissingFieldsReply,
    OverallSummaryReply,
    StepRecommendationReply,
)

OVERALL_SUMMARY_BODY = """Please analyze the following case data and provide an overall summary.

Case ID: {{case_id}}
Status: {{status}}
Current Step: {{current_step}}
Application Type: {{application_type}}
Applicant: {{applicant_name}}
Submission Date: {{submission_date}}

Documents: {{documents}}

Form Data: {{form_data}}

Case Notes: {{case_notes}}

Please provide:
1. A comprehensive summary of the case
2. Key recommendations for next steps
3. Your confidence level (0-1) in the analysis

Format your response as JSON with the following structure:
{
  "content": "detailed summary here",
  "recommendations": ["recommendation 1", "recommendation 2"],
  "confidence": 0.85
}"""

STEP_RECOMMENDATION_BODY = """Please provide specific recommendations for the following case at step: {{step}}

Case ID: {{case_id}}
Current Status: {{status}}
Application Type: {{application_type}}
Applicant: {{applicant_name}}

Recent AI Summaries: {{recent_summaries}}

Case Notes: {{recent_notes}}

For step "{{step}}", please provide:
1. Specific recommendations for this step
2. Priority level (low, medium, high)
3. Confidence in recommendations (0-1)

Format your response as JSON:
{
  "recommendations": ["specific recommendation 1", "specific recommendation 2"],
  "priority": "medium",
  "confidence": 0.8
}"""

APPLICATION_ANALYSIS_BODY = """Please analyze the following application data:

Application Type: {{application_type}}
Applicant: {{applicant_name}}
Email: {{applicant_email}}
Submission Date: {{submission_date}}

Documents Provided: {{documents}}

Form Data: {{form_data}}

Please provide:
1. A summary of the application
2. Key points identified
3. Potential issues or concerns
4. Recommended actions
5. Priority level (low, medium, high, urgent)
6. Estimated processing time
7. Required documents that may be missing

Format as JSON:
{
  "summary": "application summary",
  "keyPoints": ["point 1", "point 2"],
  "potentialIssues": ["issue 1", "issue 2"],
  "recommendedActions": ["action 1", "action 2"],
  "priorityLevel": "medium",
  "estimatedProcessingTime": "2-3 business days",
  "requiredDocuments": ["document 1", "document 2"]
}"""

FINAL_SUMMARY_BODY = """Please generate a final summary for the concluded case:

Case ID: {{case_id}}
Final Status: {{status}}
Application Type: {{application_type}}
Applicant: {{applicant_name}}

Process History:
{{process_history}}

AI Summaries Generated:
{{ai_summaries}}

Case Notes:
{{case_notes}}

Please provide:
1. Overall summary of the case
2. Key decisions made
3. Final outcomes
4. Process history summary
5. Recommended decision (approved, denied, requires_additional_info)
6. Supporting rationale

Format as JSON:
{
  "overallSummary": "comprehensive case summary",
  "keyDecisions": ["decision 1", "decision 2"],
  "outcomes": ["outcome 1", "outcome 2"],
  "processHistory": ["step 1", "step 2"],
  "recommendedDecision": "approved",
  "supportingRationale": ["rationale 1", "rationale 2"]
}"""

COMPLETENESS_VALIDATION_BODY = """Please validate the completeness of this case:

Case ID: {{case_id}}
Current Status: {{status}}
Current Step: {{current_step}}
Application Type: {{application_type}}

Documents: {{documents}}
Form Data Fields: {{form_data_fields}}

Process Steps Completed: {{completed_steps}}

Please evaluate:
1. Is the case complete for its current status?
2. What steps might be missing?
3. What documents might be missing?
4. Recommendations for completion
5. Confidence in assessment (0-1)

Format as JSON:
{
  "isComplete": true,
  "missingSteps": ["step1", "step2"],
  "missingDocuments": ["doc1", "doc2"],
  "recommendations": ["recommendation 1", "recommendation 2"],
  "confidence": 0.9
}"""

MISSING_FIELDS_BODY = """Please analyze this application for missing fields:

Application Type: {{application_type}}
Applicant: {{applicant_name}}
Email: {{applicant_email}}

Current Form Data: {{form_data}}
Documents Provided: {{documents}}

Please identify:
1. Missing required fields
2. Missing recommended fields
3. Missing optional fields that would be helpful
4. Completeness score (0-100)
5. Priority actions needed
6. Estimated time to complete missing items

Format as JSON:
{
  "missingFields": [
    {
      "fieldName": "field name",
      "fieldType": "text/number/file/etc",
      "importance": "required",
      "suggestedAction": "specific action needed"
    }
  ],
  "completenessScore": 75,
  "priorityActions": ["action 1", "action 2"],
  "estimatedCompletionTime": "1-2 hours"
}"""


def case_templates() -> list[PromptTemplate]:
    """Built-in case operation templates"""
    return [
        PromptTemplate(
            id="overall_summary_v1",
            name="Overall Case Summary",
            version="1.0",
            operation="generate_summary",
            description="Generate comprehensive case summary with recommendations",
            body=OVERALL_SUMMARY_BODY,
            output_schema=OverallSummaryReply,
            default_parameters={"max_tokens": 1000, "temperature": 0.3},
        ),
        PromptTemplate(
            id="step_recommendation_v1",
            name="Step-Specific Recommendations",
            version="1.0",
            operation="generate_recommendation",
            description="Generate recommendations for specific process steps",
            body=STEP_RECOMMENDATION_BODY,
            output_schema=StepRecommendationReply,
            default_parameters={"max_tokens": 800, "temperature": 0.4},
        ),
        PromptTemplate(
            id="application_analysis_v1",
            name="Application Analysis",
            version="1.0",
            operation="analyze_application",
            description="Analyze new application submissions",
            body=APPLICATION_ANALYSIS_BODY,
            output_schema=ApplicationAnalysisReply,
            default_parameters={"max_tokens": 1200, "temperature": 0.2},
        ),
        PromptTemplate(
            id="final_summary_v1",
            name="Final Case Summary",
            version="1.0",
            operation="generate_final_summary",
            description="Generate final summary for case conclusion",
            body=FINAL_SUMMARY_BODY,
            output_schema=FinalSummaryReply,
            default_parameters={"max_tokens": 1500, "temperature": 0.1},
        ),
        PromptTemplate(
            id="completeness_validation_v1",
            name="Case Completeness Validation",
            version="1.0",
            operation="validate_completeness",
            description="Validate case completeness before conclusion",
            body=COMPLETENESS_VALIDATION_BODY,
            output_schema=CompletenessValidationReply,
            default_parameters={"max_tokens": 800, "temperature": 0.2},
        ),
        PromptTemplate(
            id="missing_fields_v1",
            name="Missing Fields Detection",
            version="1.0",
            operation="detect_missing_fields",
            description="Detect missing fields in application data",
            body=MISSING_FIELDS_BODY,
            output_schema=MissingFieldsReply,
            default_parameters={"max_tokens": 1000, "temperature": 0.3},
        ),
    ]
