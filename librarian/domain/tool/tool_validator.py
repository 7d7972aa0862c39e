from typing import Dict, List, Any, Optional, Type
from pydantic import BaseModel, Field, ValidationError


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    value: Optional[Any] = None


def format_validation_errors(error: ValidationError) -> List[str]:
    """Flatten pydantic errors into `field.path: message` lines"""

    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        messages.append(f"{location}: {item.get('msg', 'invalid value')}")
    return messages


class ToolParameterValidator:
    @staticmethod
    def validate_tool_call(input_model: Type[BaseModel], parameters: Dict[str, Any]) -> ValidationResult:
        """Validate raw tool arguments against the tool's input model"""

        if not isinstance(parameters, dict):
            return ValidationResult(is_valid=False, errors=["arguments: must be an object"])

        try:
            value = input_model.model_validate(parameters)
        except ValidationError as e:
            return ValidationResult(is_valid=False, errors=format_validation_errors(e))

        return ValidationResult(is_valid=True, value=value)
