from django import forms


class RegisterForm(forms.Form):
    email = forms.EmailField(max_length=254)
    password = forms.CharField(min_length=8, max_length=128, strip=False)
    firstName = forms.CharField(max_length=100)
    lastName = forms.CharField(max_length=100)
    phone = forms.CharField(max_length=32, required=False)


class LoginForm(forms.Form):
    email = forms.EmailField(max_length=254)
    password = forms.CharField(max_length=128, strip=False)
