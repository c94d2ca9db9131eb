import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pandas as pd

# Start time
base_time = datetime(2026, 1, 1, 12, 0, 0)
out_dir = Path(sys.argv[1] if len(sys.argv) > 1 else "snapshot")

profiles = []
items = []
likes = []


def add_user(user_id, name):
    profiles.append({
        "id": user_id,
        "name": name,
        "avatar_url": f"https://example.com/avatars/{user_id}.png",
    })


def add_item(item_id, owner, name, category, available=True):
    items.append({
        "id": item_id,
        "user_id": owner,
        "name": name,
        "category": category,
        "image_url": f"https://example.com/items/{item_id}.jpg",
        "is_available": available,
    })


def add_like(user_id, item_id, time_offset_hours):
    likes.append({
        "user_id": user_id,
        "item_id": item_id,
        "created_at": (base_time + timedelta(hours=time_offset_hours)).strftime("%Y-%m-%dT%H:%M:%SZ"),
    })


# 1. Clear three-way trade
# ALICE -> BOB -> CAROL -> ALICE
add_user("ALICE", "Alice")
add_user("BOB", "Bob")
add_user("CAROL", "Carol")
add_item("ITEM_GUITAR", "ALICE", "Acoustic guitar", "music")
add_item("ITEM_BIKE", "BOB", "Road bike", "sports")
add_item("ITEM_CAMERA", "CAROL", "Film camera", "electronics")
add_like("BOB", "ITEM_GUITAR", 1)
add_like("CAROL", "ITEM_BIKE", 2)
add_like("ALICE", "ITEM_CAMERA", 3)

# 2. Broken chain: DAVE's lamp was already traded away
add_user("DAVE", "Dave")
add_item("ITEM_LAMP", "DAVE", "Desk lamp", "home", available=False)
add_like("CAROL", "ITEM_LAMP", 4)
add_like("DAVE", "ITEM_GUITAR", 5)

# 3. Popular item with many likers
for i in range(1, 60):
    add_user(f"FAN_{i}", f"Fan {i}")
    add_like(f"FAN_{i}", "ITEM_CAMERA", 10 + i * 0.1)

# 4. Random noise
categories = ["books", "clothing", "games", "home", "toys"]
for i in range(1, 41):
    owner = f"RANDOM_{random.randint(1, 20)}"
    add_user(owner, owner.title())
    add_item(f"ITEM_R{i:03d}", owner, f"Random item {i}", random.choice(categories))
for _ in range(120):
    liker = f"RANDOM_{random.randint(1, 20)}"
    item = random.choice(items)
    if item["user_id"] != liker:
        add_like(liker, item["id"], random.uniform(0, 100))

out_dir.mkdir(parents=True, exist_ok=True)
pd.DataFrame(profiles).drop_duplicates(subset=["id"]).to_csv(out_dir / "profiles.csv", index=False)
pd.DataFrame(items).to_csv(out_dir / "items.csv", index=False)
pd.DataFrame(likes).drop_duplicates(subset=["user_id", "item_id"]).to_csv(out_dir / "liked_items.csv", index=False)
print(f"Created snapshot in {out_dir} with {len(items)} items and {len(likes)} likes.")
