"""Editable demo menu and account configuration."""

from __future__ import annotations

MENU_ITEMS_RAW: list[dict[str, object]] = [
    {
        "id": "1",
        "name": "Masala Dosa",
        "description": "Crispy rice pancake filled with spiced potatoes, served with chutney and sambar.",
        "category": "Breakfast",
        "image_url": "https://picsum.photos/600/400",
        "ingredients": ["Rice", "Lentils", "Potatoes", "Spices", "Coconut"],
        "offered": True,
        "windows": ["Breakfast", "Snacks"],
        "portions": [("Full", 150.00)],
    },
    {
        "id": "2",
        "name": "Chicken Biryani",
        "description": "Aromatic basmati rice cooked with chicken and a blend of Indian spices.",
        "category": "Lunch",
        "image_url": "https://picsum.photos/600/401",
        "ingredients": ["Basmati Rice", "Chicken", "Yogurt", "Onion", "Spices"],
        "offered": True,
        "windows": ["Lunch", "Dinner"],
        "portions": [("Half", 200.00), ("Full", 350.00)],
    },
    {
        "id": "3",
        "name": "Paneer Butter Masala",
        "description": "Cottage cheese cubes in a creamy, tangy, and sweet tomato-based gravy.",
        "category": "Dinner",
        "image_url": "https://picsum.photos/600/402",
        "ingredients": ["Paneer", "Tomatoes", "Cream", "Butter", "Spices"],
        "offered": True,
        "windows": ["Lunch", "Dinner"],
        "portions": [("Full", 280.00)],
    },
    {
        "id": "4",
        "name": "Vegetable Caesar Salad",
        "description": "Green salad of romaine lettuce and croutons dressed with a vegetarian caesar dressing.",
        "category": "Lunch",
        "image_url": "https://picsum.photos/600/403",
        "ingredients": ["Romaine Lettuce", "Croutons", "Vegetarian Dressing", "Parmesan Cheese"],
        "offered": False,
        "windows": ["All Day"],
        "portions": [("Full", 220.00)],
    },
    {
        "id": "5",
        "name": "Gulab Jamun",
        "description": "Soft, spongy balls made of milk solids, flour & a leavening agent, soaked in sugar syrup.",
        "category": "Snacks",
        "image_url": "https://picsum.photos/600/404",
        "ingredients": ["Milk Solids (Khoya)", "Sugar", "Saffron", "Cardamom"],
        "offered": True,
        "windows": ["All Day"],
        "portions": [("2 pieces", 120.00)],
    },
    {
        "id": "6",
        "name": "Masala Chai",
        "description": "Indian tea made by boiling black tea in milk and water with aromatic herbs and spices.",
        "category": "Beverages",
        "image_url": "https://picsum.photos/600/405",
        "ingredients": ["Black Tea", "Milk", "Sugar", "Ginger", "Cardamom", "Cinnamon"],
        "offered": True,
        "windows": ["All Day"],
        "portions": [("Regular", 80.00)],
    },
    {
        "id": "7",
        "name": "Dal Makhani",
        "description": "Whole black lentils and red kidney beans slow-cooked with butter and cream.",
        "category": "Dinner",
        "image_url": "https://picsum.photos/600/406",
        "ingredients": ["Black Lentils", "Kidney Beans", "Butter", "Cream", "Spices"],
        "offered": True,
        "windows": ["Lunch", "Dinner"],
        "portions": [("Full", 250.00)],
    },
    {
        "id": "8",
        "name": "Samosa Chaat",
        "description": "Crushed samosas topped with yogurt, tamarind and mint chutneys, and spices.",
        "category": "Snacks",
        "image_url": "https://picsum.photos/600/407",
        "ingredients": ["Samosa", "Yogurt", "Tamarind Chutney", "Mint Chutney", "Spices"],
        "offered": True,
        "windows": ["Snacks"],
        "portions": [("Full", 100.00)],
    },
]

MENU_CATEGORIES: list[str] = ["Breakfast", "Lunch", "Dinner", "Snacks", "Beverages"]

# Demo sign-ins; every seeded account starts with DEMO_SECRET.
DEMO_SECRET = "password"

DEMO_ACCOUNTS_RAW: list[dict[str, str]] = [
    {"id": "user1", "name": "Alice", "email": "alice@example.com", "role": "customer"},
    {"id": "admin1", "name": "Bob", "email": "bob@example.com", "role": "admin"},
    {"id": "superadmin1", "name": "Charlie", "email": "charlie@example.com", "role": "superadmin"},
]

# (order id, account id, [(item id, portion name, quantity)], status, age in hours)
DEMO_ORDERS_RAW: list[tuple[str, str, list[tuple[str, str, int]], str, int]] = [
    ("ORD001", "user1", [("1", "Full", 1), ("3", "Full", 1), ("6", "Regular", 2)], "Delivered", 72),
    ("ORD002", "user1", [("2", "Full", 2)], "Pending", 24),
    ("ORD003", "user1", [("5", "2 pieces", 1), ("7", "Full", 1)], "Confirmed", 48),
]
