users_pk = 'users'
users_sk = '{user_id}'

orders_pk = 'orders'
orders_sk = '{order_id}'

messages_pk = 'messages'
messages_sk = '{order_id}_{timestamp}_{message_id}'

ratings_pk = 'ratings'
ratings_sk = 'stats'

user_ratings_pk = 'user_ratings'
user_ratings_sk = '{user_id}'

verification_codes_pk = 'verification_codes'
verification_codes_sk = '{email}'
