from decimal import Decimal
from typing import Dict, List, Optional

from chalice import Response

from chalicelib.constants.status_codes import http200
from chalicelib.utils import app as utils_app
from chalicelib.utils.logger import logger

CATEGORIES = ('main', 'drink', 'side')


class MenuItem:

    def __init__(self, id_: str, name: str, description: str, price: str, category: str):
        self.id_ = id_
        self.name = name.strip()
        self.description = description
        self.price = Decimal(price).quantize(Decimal('1.00'))
        self.category = category

    def to_ui(self) -> Dict:
        return {
            'id': self.id_,
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'category': self.category
        }


MENU: List[MenuItem] = [
    MenuItem('m1', 'SMASHED PUB BURGER', 'House seasoned smash burger on a pretzel bun, topped with grilled '
             'onions, colby jack cheese and garlic aioli', '10.35', 'main'),
    MenuItem('m2', 'SMASHED RODEO BURGER', 'House seasoned smash burger on a pretzel bun, topped with crispy '
             'onions, hickory BBQ sauce, bacon and cheddar cheese', '10.35', 'main'),
    MenuItem('m3', 'BEYOND PUB BURGER', 'Beyond Burger on a pretzel bun topped with avocado, lettuce, tomato, '
             'and a roasted garlic vegan aioli', '10.35', 'main'),
    MenuItem('m4', 'CHICKEN OR VEGAN TENDERS', 'Southern Fried Chicken Tenders or Vegan Tenders with hot sauce, '
             'bbq sauce or ranch for dipping', '10.35', 'main'),
    MenuItem('m5', 'BUFFALO CHICKEN SALAD', 'Mixed Greens topped with grilled or crispy chicken, cucumbers, '
             'carrots, celery and a buffalo ranch dressing', '10.35', 'main'),
    MenuItem('m6', 'HOUSE SALAD', 'Mixed greens topped with grilled or crispy chicken, with fresh cucumber, '
             'grape tomatoes, red onions, carrots, cheddar cheese and ranch or balsamic dressing', '10.35', 'main'),
    MenuItem('m7', 'BUFFALO RANCH CHICKEN WRAP', 'Choose grilled or crispy chicken on a flour tortilla, topped '
             'with buffalo ranch dressing, pepper jack cheese, blue cheese crumbles, lettuce and tomatoes',
             '10.35', 'main'),
    MenuItem('m8', 'NASHVILLE HOT CHICKEN SANDWICH', 'Southern fried chicken on a pretzel bun topped with '
             'Nashville hot sauce, sliced pickles boursin and smoked gouda spread and coleslaw', '10.35', 'main'),
    MenuItem('d1', 'Pepsi', 'Classic cola', '2.25', 'drink'),
    MenuItem('d2', 'Sprite', 'Lemon-lime soda', '2.25', 'drink'),
    MenuItem('d3', 'Diet Pepsi', 'Diet soda', '2.25', 'drink'),
    MenuItem('d4', 'Root Beer', 'Mug Root Beer', '2.25', 'drink'),
    MenuItem('s1', 'French Fries', 'Crispy golden fries', '3.10', 'side'),
    MenuItem('s2', 'Side Salad', 'Fresh mixed greens', '3.10', 'side'),
    MenuItem('s3', 'Fresh Fruit Cup', 'Seasonal fruit', '3.10', 'side'),
    MenuItem('s4', 'Sautéed Vegetable', 'Seasonal vegetables', '3.10', 'side'),
]

MENU_BY_ID: Dict[str, MenuItem] = {item.id_: item for item in MENU}


def get_menu_item(menu_item_id: str) -> Optional[MenuItem]:
    return MENU_BY_ID.get(menu_item_id)


@utils_app.log_start_finish
def endpoint_get_menu() -> Response:
    menu = {category: [item.to_ui() for item in MENU if item.category == category] for category in CATEGORIES}
    logger.info(f"endpoint_get_menu ::: returning {len(MENU)} menu items")
    return Response(status_code=http200, body=menu)
