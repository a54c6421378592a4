def get_verification_link_message(name, link):
    return f"""
        Hi {name or 'there'},\n
        Finish creating your LateGrub account by opening the link below:\n
        {link}\n
        If you did not request this, you can ignore this email.
    """


def get_verification_link_html(name, link):
    return f'''
    <p style="white-space: pre-line">Hi {name or 'there'},
    Finish creating your LateGrub account by clicking <a href="{link}" target="_blank">here</a>.</p>
    '''
