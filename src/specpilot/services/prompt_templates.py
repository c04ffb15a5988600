# src/specpilot/services/prompt_templates.py

"""
Prompt builders for the two LLM stages of the pipeline:

- enhancement: rewrite a terse feature request into a detailed prompt
- specification: turn the enhanced prompt into an OpenAPI 3.0 YAML document

Both are pure functions of their input.
"""

from __future__ import annotations

ENHANCE_SYSTEM_PROMPT = (
    "You are an expert prompt engineer specializing in code generation prompts."
)

SPECIFY_SYSTEM_PROMPT = """You are an expert API designer specializing in OpenAPI (Swagger) 3.0 specifications.
Your task is to create syntactically perfect OpenAPI 3.0 YAML specifications.
Follow these strict rules:
1. NEVER include markdown code block markers like ```yaml or ``` in your response
2. Start directly with the OpenAPI specification (openapi: 3.0.0)
3. Ensure all YAML is properly indented and syntactically correct
4. Use only valid OpenAPI 3.0 syntax
5. Include proper schema definitions for all data models
6. Define clear request and response objects
7. Include appropriate examples for requests and responses
8. Use proper data types (string, integer, boolean, etc.)
9. Ensure all references are valid
10. Include proper error responses (400, 401, 403, 404, 500)"""


def build_enhancement_prompt(user_text: str) -> str:
    """Ask for a more detailed, technically specific version of ``user_text``."""
    return f"""Your task is to enhance and improve the following user prompt to make it more detailed, specific, and effective for generating high-quality source code.

Original prompt: "{user_text}"

Provide an enhanced version of this prompt that:
1. Adds more specific technical details and context
2. Clarifies any ambiguous parts related to the code requirements
3. Structures the prompt in a clear way that will lead to better code generation
4. Includes any relevant constraints, patterns, or best practices to follow
5. Specifies language, framework, or library preferences if they were implied

Return ONLY the enhanced prompt without any explanations, introductions, or additional text."""


def build_specification_prompt(enhanced_text: str) -> str:
    """Ask for a complete OpenAPI 3.0 YAML document derived from ``enhanced_text``."""
    return f"""Based on the following requirements, create a comprehensive OpenAPI (Swagger) 3.0 specification in YAML format.

Requirements:
{enhanced_text}

Your task:
1. Analyze the requirements thoroughly
2. Identify all the key features and functionality needed
3. Determine what API endpoints would be required
4. Create a complete OpenAPI 3.0 specification in YAML format that includes:
   - Appropriate paths and operations
   - Request parameters and bodies with proper schemas
   - Response schemas and examples
   - Clear descriptions for all components
   - Proper error responses
   - Authentication requirements if applicable

IMPORTANT:
- Do NOT include any markdown formatting or code block markers
- Start directly with 'openapi: 3.0.0'
- Ensure all YAML is properly indented and syntactically correct
- Use only valid OpenAPI 3.0 syntax
- Include proper schema definitions for all data models
- Define clear request and response objects
- Include appropriate examples for requests and responses
- Use proper data types (string, integer, boolean, etc.)
- Ensure all references are valid
- Include proper error responses (400, 401, 403, 404, 500)

Return ONLY the OpenAPI specification in YAML format, without any explanations, markdown formatting, or additional text."""


SUGGESTIONS = (
    "Create a React component for a responsive navigation bar with dropdown menus",
    "Generate a Node.js API endpoint for user authentication with JWT",
    "Build a data table component with sorting and filtering capabilities",
    "Create a form validation utility using Zod and React Hook Form",
    "Design a custom hook for fetching and caching API data",
    "Generate a serverless function for processing image uploads",
    "Create a Next.js API route for connecting to a database",
    "Build a state management solution using React Context and useReducer",
)
