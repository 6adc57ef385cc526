"""
Response helper utilities for handling UUID conversions and model validation
"""
from typing import Any, Dict, List
import uuid
from pydantic import BaseModel


def convert_uuids_to_strings(obj: Any) -> Any:
    """
    Recursively convert UUID objects to strings in any data structure
    """
    if isinstance(obj, uuid.UUID):
        return str(obj)
    elif isinstance(obj, dict):
        return {key: convert_uuids_to_strings(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [convert_uuids_to_strings(item) for item in obj]
    elif isinstance(obj, BaseModel):
        return obj
    elif hasattr(obj, '__dict__'):
        # Handle SQLAlchemy models and other objects with __dict__
        result = {}
        for key, value in obj.__dict__.items():
            if not key.startswith('_'):  # Skip SQLAlchemy internal attributes
                result[key] = convert_uuids_to_strings(value)
        return result
    else:
        return obj


def safe_model_validate(model_class: BaseModel, data: Any) -> BaseModel:
    """
    Safely validate a model by converting UUIDs to strings first
    """
    if hasattr(data, '__dict__') and not isinstance(data, BaseModel):
        # If it's a SQLAlchemy model, convert to dict first
        data = data.__dict__.copy()

    # Convert UUIDs to strings
    clean_data = convert_uuids_to_strings(data)

    # Remove SQLAlchemy internal keys if present
    if isinstance(clean_data, dict):
        clean_data = {k: v for k, v in clean_data.items() if not k.startswith('_')}

    return model_class.model_validate(clean_data)


def safe_model_validate_list(model_class: BaseModel, data_list: List[Any]) -> List[BaseModel]:
    """
    Safely validate a list of models by converting UUIDs to strings first
    """
    return [safe_model_validate(model_class, item) for item in data_list]


def location_to_geojson(longitude: float, latitude: float) -> Dict[str, Any]:
    return {"type": "Point", "coordinates": [longitude, latitude]}


# Specific helper functions for common models
def user_to_dict(user) -> Dict[str, Any]:
    """Convert User model to dict with string UUIDs, never exposing the password hash"""
    return {
        'id': str(user.id),
        'name': user.name,
        'email': user.email,
        'role': user.role,
        'phone_number': user.phone_number,
        'location': location_to_geojson(user.longitude, user.latitude),
        'community_id': str(user.community_id) if user.community_id else None,
        'created_at': user.created_at,
        'updated_at': user.updated_at
    }


def produce_to_dict(produce) -> Dict[str, Any]:
    """Convert Produce model to dict with string UUIDs"""
    return {
        'id': str(produce.id),
        'name': produce.name,
        'quantity': produce.quantity,
        'price': produce.price,
        'unit': produce.unit,
        'image_url': produce.image_url,
        'farmer_id': str(produce.farmer_id),
        'created_at': produce.created_at,
        'updated_at': produce.updated_at
    }


def order_to_dict(order) -> Dict[str, Any]:
    """Convert Order model to dict with string UUIDs"""
    return {
        'id': str(order.id),
        'community_id': str(order.community_id),
        'produce_id': str(order.produce_id),
        'farmer_id': str(order.farmer_id),
        'ordered_by': str(order.ordered_by),
        'quantity': order.quantity,
        'status': order.status,
        'created_at': order.created_at,
        'updated_at': order.updated_at
    }


def interest_to_dict(interest) -> Dict[str, Any]:
    """Convert Interest model to dict with string UUIDs"""
    return {
        'id': str(interest.id),
        'user_id': str(interest.user_id),
        'product_id': str(interest.product_id),
        'quantity': interest.quantity,
        'created_at': interest.created_at,
        'updated_at': interest.updated_at
    }
