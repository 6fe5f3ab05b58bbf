"""Seed data for the in-memory store and ``scripts/seed_data.py``."""
import copy
from typing import Any, Dict, List

INVENTORY_ITEMS: List[Dict[str, Any]] = [
    # Menu ingredients
    {
        "id": "menu-001", "name": "Premium Coffee Beans",
        "description": "Arabica coffee beans for breakfast service",
        "category": "menu-items", "type": "consumable", "unit": "kg",
        "currentStock": 15, "restockThreshold": 20, "maxStock": 100,
        "location": "Kitchen Storage", "supplier": "Coffee Roasters Ltd", "cost": 1275.00,
        "expirationDate": "2024-03-15T00:00:00+00:00",
    },
    {
        "id": "menu-002", "name": "Fresh Salmon Fillets",
        "description": "Atlantic salmon for dinner menu",
        "category": "menu-items", "type": "consumable", "unit": "kg",
        "currentStock": 0, "restockThreshold": 5, "maxStock": 25,
        "location": "Walk-in Freezer", "supplier": "Ocean Fresh Seafood", "cost": 2250.00,
        "expirationDate": "2024-01-25T00:00:00+00:00",
    },
    {
        "id": "menu-003", "name": "Organic Vegetables Mix",
        "description": "Seasonal vegetables for side dishes",
        "category": "menu-items", "type": "consumable", "unit": "kg",
        "currentStock": 8, "restockThreshold": 10, "maxStock": 30,
        "location": "Cold Storage", "supplier": "Green Valley Farms", "cost": 637.50,
        "expirationDate": "2024-01-28T00:00:00+00:00",
    },
    {
        "id": "menu-004", "name": "Wagyu Beef Steaks",
        "description": "Premium wagyu beef for signature dishes",
        "category": "menu-items", "type": "consumable", "unit": "kg",
        "currentStock": 12, "restockThreshold": 8, "maxStock": 20,
        "location": "Walk-in Freezer", "supplier": "Premium Meats Co", "cost": 6000.00,
        "expirationDate": "2024-02-10T00:00:00+00:00",
    },
    {
        "id": "menu-005", "name": "Fresh Pasta",
        "description": "House-made pasta for Italian dishes",
        "category": "menu-items", "type": "consumable", "unit": "kg",
        "currentStock": 5, "restockThreshold": 10, "maxStock": 25,
        "location": "Kitchen Storage", "supplier": "Artisan Pasta Co", "cost": 925.00,
        "expirationDate": "2024-01-26T00:00:00+00:00",
    },
    {
        "id": "menu-006", "name": "Truffle Oil",
        "description": "Premium truffle oil for gourmet dishes",
        "category": "menu-items", "type": "consumable", "unit": "bottles",
        "currentStock": 3, "restockThreshold": 5, "maxStock": 15,
        "location": "Kitchen Storage", "supplier": "Gourmet Oils Ltd", "cost": 4250.00,
        "expirationDate": "2024-12-31T00:00:00+00:00",
    },
    # Housekeeping consumables
    {
        "id": "toiletry-001", "name": "Luxury Shampoo Bottles",
        "description": "Premium shampoo for guest rooms",
        "category": "toiletries", "type": "consumable", "unit": "bottles",
        "currentStock": 45, "restockThreshold": 50, "maxStock": 200,
        "location": "Housekeeping Storage", "supplier": "Hotel Amenities Co", "cost": 425.00,
        "expirationDate": "2025-06-30T00:00:00+00:00",
    },
    {
        "id": "toiletry-002", "name": "Bath Towels",
        "description": "Egyptian cotton bath towels",
        "category": "toiletries", "type": "consumable", "unit": "pieces",
        "currentStock": 120, "restockThreshold": 100, "maxStock": 300,
        "location": "Linen Room", "supplier": "Luxury Linens Ltd", "cost": 1750.00,
    },
    {
        "id": "cleaning-001", "name": "Multi-Surface Disinfectant",
        "description": "Hospital-grade disinfectant for room cleaning",
        "category": "cleaning-supplies", "type": "consumable", "unit": "liters",
        "currentStock": 25, "restockThreshold": 30, "maxStock": 100,
        "location": "Cleaning Supply Room", "supplier": "CleanPro Solutions", "cost": 787.50,
        "expirationDate": "2024-12-31T00:00:00+00:00",
    },
    # Room equipment
    {
        "id": "asset-tv-102", "name": "Smart TV 43\"",
        "description": "Smart television for standard room",
        "category": "equipment", "type": "asset", "unit": "unit",
        "currentStock": 1, "restockThreshold": 1, "maxStock": 1,
        "location": "Room 102", "supplier": "Electronics Wholesale", "cost": 25000.00,
    },
]

_SUPPLIER_SNAPSHOTS = {
    "supplier-001": {
        "id": "supplier-001", "name": "Coffee Roasters Ltd", "contactPerson": "John Smith",
        "email": "john@coffeeroasters.com", "phone": "+1-555-0123",
    },
    "supplier-002": {
        "id": "supplier-002", "name": "Ocean Fresh Seafood", "contactPerson": "Maria Garcia",
        "email": "maria@oceanfresh.com", "phone": "+1-555-0456",
    },
    "supplier-003": {
        "id": "supplier-003", "name": "Green Valley Farms", "contactPerson": "David Wilson",
        "email": "david@greenvalley.com", "phone": "+1-555-0789",
    },
    "supplier-004": {
        "id": "supplier-004", "name": "Hotel Amenities Co", "contactPerson": "Sarah Johnson",
        "email": "sarah@hotelamenities.com", "phone": "+1-555-0321",
    },
}

PURCHASE_ORDERS: List[Dict[str, Any]] = [
    {
        "id": "po-001", "orderNumber": "PO-2024-001",
        "supplier": _SUPPLIER_SNAPSHOTS["supplier-001"],
        "items": [{
            "inventoryItemId": "menu-001", "itemName": "Premium Coffee Beans", "unit": "kg",
            "quantity": 50, "unitCost": 1275.00, "totalCost": 63750.00,
        }],
        "status": "approved", "priority": "normal", "totalAmount": 63750.00,
        "requestedBy": "purchasing-officer-001", "approvedBy": "inventory-controller-001",
        "approvedAt": "2024-01-21T00:00:00+00:00",
        "expectedDelivery": "2024-01-30T00:00:00+00:00",
        "createdAt": "2024-01-20T00:00:00+00:00", "updatedAt": "2024-01-21T00:00:00+00:00",
        "statusHistory": [
            {"status": "pending", "reason": "Order created",
             "changedBy": "purchasing-officer-001", "changedAt": "2024-01-20T00:00:00+00:00"},
            {"status": "approved", "reason": "Order approved",
             "changedBy": "inventory-controller-001", "changedAt": "2024-01-21T00:00:00+00:00"},
        ],
    },
    {
        "id": "po-002", "orderNumber": "PO-2024-002",
        "supplier": _SUPPLIER_SNAPSHOTS["supplier-002"],
        "items": [{
            "inventoryItemId": "menu-002", "itemName": "Fresh Salmon Fillets", "unit": "kg",
            "quantity": 20, "unitCost": 2250.00, "totalCost": 45000.00,
        }],
        "status": "pending", "priority": "high", "totalAmount": 45000.00,
        "requestedBy": "purchasing-officer-001",
        "expectedDelivery": "2024-01-28T00:00:00+00:00",
        "createdAt": "2024-01-22T00:00:00+00:00", "updatedAt": "2024-01-22T00:00:00+00:00",
        "statusHistory": [
            {"status": "pending", "reason": "Order created",
             "changedBy": "purchasing-officer-001", "changedAt": "2024-01-22T00:00:00+00:00"},
        ],
    },
    {
        "id": "po-003", "orderNumber": "PO-2024-003",
        "supplier": _SUPPLIER_SNAPSHOTS["supplier-003"],
        "items": [{
            "inventoryItemId": "menu-003", "itemName": "Organic Vegetables Mix", "unit": "kg",
            "quantity": 30, "unitCost": 600.00, "totalCost": 18000.00,
        }],
        "status": "in-transit", "priority": "normal", "totalAmount": 18000.00,
        "requestedBy": "purchasing-officer-001", "approvedBy": "inventory-controller-001",
        "expectedDelivery": "2024-01-26T00:00:00+00:00",
        "createdAt": "2024-01-18T00:00:00+00:00", "updatedAt": "2024-01-20T00:00:00+00:00",
        "statusHistory": [],
    },
    {
        "id": "po-004", "orderNumber": "PO-2024-004",
        "supplier": _SUPPLIER_SNAPSHOTS["supplier-004"],
        "items": [{
            "inventoryItemId": "toiletry-001", "itemName": "Luxury Shampoo Bottles",
            "unit": "bottles", "quantity": 100, "unitCost": 125.00, "totalCost": 12500.00,
        }],
        "status": "delivered", "priority": "low", "totalAmount": 12500.00,
        "actualTotalAmount": 12500.00,
        "requestedBy": "purchasing-officer-001", "approvedBy": "inventory-controller-001",
        "expectedDelivery": "2024-01-15T00:00:00+00:00",
        "receivedAt": "2024-01-15T00:00:00+00:00",
        "createdAt": "2024-01-10T00:00:00+00:00", "updatedAt": "2024-01-15T00:00:00+00:00",
        "statusHistory": [],
    },
]


def _supplier(snapshot, address, rating, reliability, quality, response, orders, on_time, issues,
              evaluated, approved=True):
    return {
        **snapshot,
        "address": address,
        "categories": ["menu-items"],
        "isActive": approved,
        "isApproved": approved,
        "approvedBy": "inventory-controller-001" if approved else None,
        "performanceMetrics": {
            "overallRating": rating, "deliveryReliability": reliability,
            "qualityRating": quality, "responseTime": response, "totalOrders": orders,
            "onTimeDeliveries": on_time, "qualityIssues": issues,
            "lastEvaluationDate": evaluated,
        },
        "createdAt": "2023-01-01T00:00:00+00:00",
    }


SUPPLIERS: List[Dict[str, Any]] = [
    _supplier(_SUPPLIER_SNAPSHOTS["supplier-001"], "123 Coffee Street, Bean City, BC 12345",
              4.5, 95, 4.8, 2, 24, 23, 1, "2024-01-15T00:00:00+00:00"),
    _supplier(_SUPPLIER_SNAPSHOTS["supplier-002"], "456 Harbor Drive, Coastal City, CC 67890",
              4.2, 88, 4.6, 4, 18, 16, 2, "2024-01-10T00:00:00+00:00"),
    _supplier(_SUPPLIER_SNAPSHOTS["supplier-003"], "789 Farm Road, Valley Town, VT 13579",
              4.7, 92, 4.9, 1, 32, 30, 0, "2024-01-20T00:00:00+00:00"),
    _supplier(_SUPPLIER_SNAPSHOTS["supplier-004"], "321 Supply Avenue, Commerce City, CC 24680",
              3.8, 80, 3.9, 6, 12, 9, 3, "2024-01-12T00:00:00+00:00", approved=False),
]


def _dish(item_id, name, description, category, available, prep_minutes, quantity):
    return {
        "id": item_id, "name": name, "description": description, "category": category,
        "isAvailable": available, "preparationTime": prep_minutes,
        "requiredIngredients": [
            {"ingredientId": item_id, "quantityRequired": quantity, "unit": "kg", "isCritical": True},
        ],
    }


DEFAULT_MENU_ITEMS: List[Dict[str, Any]] = [
    _dish("menu-001", "Premium Coffee Beans", "Arabica coffee beans for breakfast service",
          "beverage", True, 5, 0.05),
    _dish("menu-002", "Fresh Salmon Fillets", "Atlantic salmon for dinner menu",
          "main-course", False, 25, 0.2),
    _dish("menu-003", "Organic Vegetables Mix", "Seasonal vegetables for side dishes",
          "appetizer", True, 15, 0.15),
    _dish("menu-004", "Wagyu Beef Steaks", "Premium wagyu beef for signature dishes",
          "main-course", True, 35, 0.25),
    _dish("menu-005", "Fresh Pasta", "House-made pasta for Italian dishes",
          "main-course", True, 20, 0.15),
]


def _keyed(docs: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    out = {}
    for doc in docs:
        doc = copy.deepcopy(doc)
        out[doc.pop("id")] = doc
    return out


def fixture_seed() -> Dict[str, Any]:
    """The full fixture tree, keyed collection -> id -> document."""
    return {
        "inventory": _keyed(INVENTORY_ITEMS),
        "purchaseOrders": _keyed(PURCHASE_ORDERS),
        "suppliers": _keyed(SUPPLIERS),
        "menu": _keyed(DEFAULT_MENU_ITEMS),
    }
